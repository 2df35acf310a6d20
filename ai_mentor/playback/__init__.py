from ai_mentor.playback.controller import (
    PlaybackController,
    clamp_speed,
    loop_scheduler,
    slider_to_speed_ms,
    speed_ms_to_slider,
)

__all__ = [
    "PlaybackController",
    "clamp_speed",
    "loop_scheduler",
    "slider_to_speed_ms",
    "speed_ms_to_slider",
]
