"""Small page fragments."""

from __future__ import annotations

import random

_VIDEOS = (
    "PWD0ZbR7AOY",
    "HoU29ljOmTE",
    "PR2vUm-Ald8",
    "opZoEmsu_Lo",
    "txZFFTusSvw",
    "Ixq9xL2tvRU",
    "-3IAx_r4Au0",
    "wObZkycA6sc",
    "hZxYLa97gDg",
    "hwn2kw4eFJM",
    "wX2t_8HOtiY",
    "tLQjcf45fKE",
    "7DvMRAMuMrU",
    "SXFP9HgWBYQ",
    "YDrgO0Oj3Fg",
    "wxWV_sUGPB0",
    "uw0h2O7UaZ8",
    "blE4lnfEWbU",
)


def view_main_func_easter_egg() -> str:
    """An embedded player for a randomly chosen video (the last one is never chosen)."""
    video = _VIDEOS[random.randrange(len(_VIDEOS) - 1)]
    return (
        '<iframe width="640" height="360" src="https://www.youtube.com/embed/'
        + video
        + '" frameborder="0" allowfullscreen></iframe>'
    )


def view_setting_404_page() -> str:
    """Content of the custom not-found page; there is none."""
    return ""