"""Moon Phase Explorer: Streamlit app for the orbit and phases of the moon."""

import asyncio
import html

import anthropic
import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv
from streamlit_js_eval import streamlit_js_eval

load_dotenv()

from moonphases.compute import (  # noqa: E402
    classify_phase,
    generate_stars,
    illuminated_fraction,
)
from moonphases.encoder import EncoderUnavailableError, EncodingError, GifEncoder  # noqa: E402
from moonphases.export import FrameSequencer  # noqa: E402
from moonphases.i18n import t  # noqa: E402
from moonphases.models import ExportSettings  # noqa: E402
from moonphases.narrative import NarrativeUnavailableError, generate_fun_fact  # noqa: E402
from moonphases.renderers.plotly_2d import render_fraction_chart  # noqa: E402
from moonphases.renderers.static import ViewRenderer  # noqa: E402
from moonphases.renderers.svg_2d import (  # noqa: E402
    export_svg,
    render_moon_svg,
    render_orbit_svg,
)
from moonphases.state import AngleState  # noqa: E402

# --- Language detection (browser-first via streamlit-js-eval) ---
# On the first run the JS call returns None; the rerun triggered by
# streamlit_js_eval fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ja" if _browser_lang.lower().startswith("ja") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="🌙",
    layout="wide",
    initial_sidebar_state="collapsed",
)

# --- Session state initialization ---
if "angle_state" not in st.session_state:
    st.session_state.angle_state = AngleState(0.0)
if "stars" not in st.session_state:
    st.session_state.stars = generate_stars()
if "playing" not in st.session_state:
    st.session_state.playing = True
if "speed" not in st.session_state:
    st.session_state.speed = 0.5
if "narrative" not in st.session_state:
    st.session_state.narrative = None
if "gif_bytes" not in st.session_state:
    st.session_state.gif_bytes = None
if "error_msg" not in st.session_state:
    st.session_state.error_msg = None

state: AngleState = st.session_state.angle_state

# Animation tick. Advance = speed * dt(ms) * 0.05 degrees.
_TICK_MS = 100

st.markdown(
    """
    <style>
    html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
        background-color: #020617 !important;
        color: #f1f5f9;
    }
    [data-testid="stHeader"], [data-testid="stToolbar"] {
        display: none !important;
    }
    h1, h2, h3 { color: #a5b4fc !important; }
    .phase-name { color: #fef08a; font-size: 2rem; font-weight: 700; text-align: center; }
    .phase-caption { color: #cbd5e1; font-size: 1.1rem; text-align: center; }
    .narrative-box {
        background: rgba(30, 27, 75, 0.5);
        border: 1px solid rgba(99, 102, 241, 0.3);
        border-radius: 12px;
        padding: 1rem 1.2rem;
        margin-top: 0.8rem;
        color: #e0e7ff;
    }
    </style>
    """,
    unsafe_allow_html=True,
)

st.title(t("page_title", _lang))
st.caption(t("subtitle", _lang))


def _on_angle_slider() -> None:
    if state.export_in_progress:
        return
    st.session_state.playing = False
    st.session_state.narrative = None
    state.set(float(st.session_state.angle_slider))


@st.fragment(run_every=_TICK_MS / 1000 if st.session_state.playing else None)
def _scene() -> None:
    if st.session_state.playing and not state.export_in_progress:
        state.set((state.get() + st.session_state.speed * _TICK_MS * 0.05) % 360)
    angle = state.get()
    stars = st.session_state.stars

    col_orbit, col_moon = st.columns(2)
    with col_orbit:
        st.subheader(f"1 · {t('heading_orbit', _lang)}")
        components.html(render_orbit_svg(angle, stars, _lang), height=410)
    with col_moon:
        st.subheader(f"2 · {t('heading_moon', _lang)}")
        components.html(render_moon_svg(angle, stars, _lang), height=410)

    phase = classify_phase(angle, _lang)
    st.markdown(
        f"<div class='phase-name'>{html.escape(phase.name)}</div>"
        f"<p class='phase-caption'>{html.escape(phase.caption)}</p>"
        f"<p class='phase-caption'>{t('label_lit', _lang)}: {illuminated_fraction(angle):.0%}</p>",
        unsafe_allow_html=True,
    )
    st.plotly_chart(
        render_fraction_chart(angle, _lang),
        use_container_width=True,
        config={"displayModeBar": False},
    )

    st.session_state.angle_slider = float(round(angle, 1))
    st.slider(
        t("label_angle", _lang),
        min_value=0.0,
        max_value=360.0,
        step=1.0,
        key="angle_slider",
        on_change=_on_angle_slider,
        disabled=state.export_in_progress,
    )


_scene()

# --- Controls ---
col_play, col_speed = st.columns([1, 3])
with col_play:
    label = t("btn_pause", _lang) if st.session_state.playing else t("btn_play", _lang)
    if st.button(label, disabled=state.export_in_progress):
        st.session_state.playing = not st.session_state.playing
        st.rerun()
with col_speed:
    st.slider(
        t("label_speed", _lang),
        min_value=0.1,
        max_value=2.0,
        step=0.1,
        key="speed",
        disabled=state.export_in_progress,
    )

# --- Dr. Moon ---
if st.button(t("btn_ask", _lang)):
    phase = classify_phase(state.get(), _lang)
    with st.spinner(t("loading_narrative", _lang)):
        try:
            st.session_state.narrative = generate_fun_fact(
                phase, illuminated_fraction(state.get()), _lang
            )
        except NarrativeUnavailableError:
            st.session_state.narrative = t("narrative_no_key", _lang)
        except anthropic.APIError:
            st.session_state.narrative = t("narrative_fallback", _lang)

if st.session_state.narrative:
    st.markdown(
        f"<div class='narrative-box'><strong>{t('narrative_title', _lang)}</strong>"
        f"<p>{html.escape(st.session_state.narrative)}</p></div>",
        unsafe_allow_html=True,
    )

# --- Downloads ---
col_svg_orbit, col_svg_moon, col_gif = st.columns(3)
with col_svg_orbit:
    st.download_button(
        f"{t('btn_svg', _lang)} (orbit)",
        data=export_svg(render_orbit_svg(state.get(), st.session_state.stars, _lang)),
        file_name="orbit-view.svg",
        mime="image/svg+xml",
    )
with col_svg_moon:
    st.download_button(
        f"{t('btn_svg', _lang)} (moon)",
        data=export_svg(render_moon_svg(state.get(), st.session_state.stars, _lang)),
        file_name="moon-view.svg",
        mime="image/svg+xml",
    )


def _deliver(data: bytes, filename: str) -> None:
    st.session_state.gif_bytes = (data, filename)


async def _export_gif() -> None:
    settings = ExportSettings()
    renderer = ViewRenderer(state, st.session_state.stars, lang=_lang)
    sequencer = FrameSequencer(
        state,
        renderer,
        GifEncoder(settings.width, settings.height),
        deliver=_deliver,
        lang=_lang,
        filename=settings.filename,
    )
    try:
        await sequencer.export(
            total_frames=settings.total_frames,
            frame_delay_ms=settings.frame_delay_ms,
            width=settings.width,
            height=settings.height,
        )
    finally:
        renderer.close()


with col_gif:
    if st.button(t("btn_gif", _lang), disabled=state.export_in_progress):
        st.session_state.playing = False
        st.session_state.error_msg = None
        with st.spinner(t("loading_gif", _lang)):
            try:
                asyncio.run(_export_gif())
            except (EncoderUnavailableError, EncodingError) as e:
                st.session_state.error_msg = t("error_gif", _lang).format(
                    error=html.escape(str(e))
                )
        st.session_state.playing = True
        st.rerun()
    if st.session_state.gif_bytes is not None:
        data, filename = st.session_state.gif_bytes
        st.download_button(
            t("btn_gif_download", _lang),
            data=data,
            file_name=filename,
            mime="image/gif",
        )

if st.session_state.error_msg:
    st.error(st.session_state.error_msg)

st.caption(t("footer", _lang))
