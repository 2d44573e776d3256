"""Simple two-language (ja/en) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "ja": "月の満ち欠け",
        "en": "Moon Phases",
    },
    "subtitle": {
        "ja": "地球、月、太陽の位置と見え方を学ぼう！",
        "en": "Learn how the Sun, Earth and Moon line up.",
    },
    "heading_orbit": {
        "ja": "宇宙から見たようす",
        "en": "Seen from space",
    },
    "heading_moon": {
        "ja": "地球から見たようす",
        "en": "Seen from Earth",
    },
    "label_angle": {
        "ja": "操作 (Manual)",
        "en": "Orbital angle",
    },
    "label_speed": {
        "ja": "速さ (Speed)",
        "en": "Speed",
    },
    "label_lit": {
        "ja": "光っている部分",
        "en": "Illuminated",
    },
    "btn_play": {
        "ja": "▶ 再生",
        "en": "▶ Play",
    },
    "btn_pause": {
        "ja": "❚❚ 一時停止",
        "en": "❚❚ Pause",
    },
    "btn_svg": {
        "ja": "SVGを保存",
        "en": "Save SVG",
    },
    "btn_gif": {
        "ja": "アニメGIFを作る",
        "en": "Make animated GIF",
    },
    "btn_gif_download": {
        "ja": "アニメGIFを保存",
        "en": "Save animated GIF",
    },
    "btn_ask": {
        "ja": "もっと詳しく聞く (Ask Dr. Moon)",
        "en": "Ask Dr. Moon",
    },
    "loading_gif": {
        "ja": "アニメGIFを作っているよ",
        "en": "Rendering the animation",
    },
    "loading_narrative": {
        "ja": "月博士が考え中",
        "en": "Dr. Moon is thinking",
    },
    "narrative_title": {
        "ja": "🌙 月博士の一言メモ:",
        "en": "🌙 Dr. Moon says:",
    },
    "narrative_no_key": {
        "ja": "月博士はおやすみ中です (APIキーが設定されていません)。",
        "en": "Dr. Moon is sleeping (no API key configured).",
    },
    "narrative_fallback": {
        "ja": "ごめんね、ちょっと通信の調子が悪いみたい。",
        "en": "Sorry, Dr. Moon can't be reached right now.",
    },
    "error_gif": {
        "ja": "アニメGIFを作れませんでした。もう一度試してね。({error})",
        "en": "Failed to generate the GIF. Please try again. ({error})",
    },
    "overlay_phase": {
        "ja": "Phase: {name}",
        "en": "Phase: {name}",
    },
    "label_sun": {
        "ja": "太陽 (SUN)",
        "en": "SUN",
    },
    "label_earth": {
        "ja": "地球 (EARTH)",
        "en": "EARTH",
    },
    "label_moon": {
        "ja": "月",
        "en": "Moon",
    },
    "label_moon_view": {
        "ja": "地球から見た月",
        "en": "The Moon from Earth",
    },
    "footer": {
        "ja": "© 2024 Moon Phase Explorer. 学習用ツール",
        "en": "© 2024 Moon Phase Explorer. Educational Tool.",
    },
    # --- Phase names / captions, keyed by PhaseType.value ---
    "phase_new_moon_name": {
        "ja": "新月 (しんげつ)",
        "en": "New Moon",
    },
    "phase_new_moon_caption": {
        "ja": "お月さまは、地球と太陽のあいだにいるよ。太陽の光が当たる場所が向こう側だから、地球からは真っ暗で見えないんだ。",
        "en": "The moon is between the Earth and the Sun.",
    },
    "phase_waxing_crescent_name": {
        "ja": "三日月 (みかづき)",
        "en": "Waxing Crescent",
    },
    "phase_waxing_crescent_caption": {
        "ja": "夕方の西の空に見える細いお月さまだよ。これからだんだん丸くなっていくよ。",
        "en": "A sliver of the moon becomes visible.",
    },
    "phase_first_quarter_name": {
        "ja": "上弦の月 (じょうげんのつき)",
        "en": "First Quarter",
    },
    "phase_first_quarter_caption": {
        "ja": "右半分が光っているお月さまだよ。お昼ごろにのぼって、真夜中にしずむんだ。",
        "en": "Half of the moon is visible.",
    },
    "phase_waxing_gibbous_name": {
        "ja": "十三夜 (じゅうさんや)",
        "en": "Waxing Gibbous",
    },
    "phase_waxing_gibbous_caption": {
        "ja": "満月まであと少し！とても明るくて、形が少しふくらんで見えるね。",
        "en": "Most of the moon is visible.",
    },
    "phase_full_moon_name": {
        "ja": "満月 (まんげつ)",
        "en": "Full Moon",
    },
    "phase_full_moon_caption": {
        "ja": "お月さま、地球、太陽が一直線にならんでいるよ。お月さまの全体に光が当たって、まんまるに見えるね！",
        "en": "The entire face of the moon is illuminated.",
    },
    "phase_waning_gibbous_name": {
        "ja": "十八夜 (じゅうはちや)",
        "en": "Waning Gibbous",
    },
    "phase_waning_gibbous_caption": {
        "ja": "満月をすぎて、少しずつ欠けてきたお月さまだよ。",
        "en": "The moon starts to shrink.",
    },
    "phase_last_quarter_name": {
        "ja": "下弦の月 (かげんのつき)",
        "en": "Last Quarter",
    },
    "phase_last_quarter_caption": {
        "ja": "左半分が光っているお月さまだよ。真夜中にのぼって、お昼ごろにしずむんだ。",
        "en": "The other half of the moon is visible.",
    },
    "phase_waning_crescent_name": {
        "ja": "二十六夜 (にじゅうろくや)",
        "en": "Waning Crescent",
    },
    "phase_waning_crescent_caption": {
        "ja": "夜明け前の東の空に見える、細いお月さまだよ。もうすぐ新月にもどるね。",
        "en": "Only a sliver remains before the new moon.",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
