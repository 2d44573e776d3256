"""Streamlit entry point: ``streamlit run app.py``."""

import runpy

runpy.run_module("moonphases.app", run_name="__main__")
