# src/services/duration.py
"""
Suma de duraciones de video.

Los subtopics guardan `videoPlaybackTime` como "HH:MM:SS" (reloj de 0 a 23 h);
los totales por topic y por curso son duraciones, no horas del día: las
horas pueden superar 23 y no hay wraparound.
"""
import re
from typing import Iterable

from src.utils.errors import DurationFormatError

PLAYBACK_TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]:[0-5][0-9]$")
_DURATION_PATTERN = re.compile(r"^(\d+):([0-5][0-9]):([0-5][0-9])$")


def is_valid_playback_time(value: str) -> bool:
    return isinstance(value, str) and PLAYBACK_TIME_PATTERN.match(value) is not None


def parse_playback_time(value: str) -> int:
    """Convierte "HH:MM:SS" de un subtopic a segundos."""
    if not is_valid_playback_time(value):
        raise DurationFormatError(
            f"{value} is not a valid video playback time! Use HH:MM:SS format."
        )
    hours, minutes, seconds = (int(part) for part in value.split(":"))
    return hours * 3600 + minutes * 60 + seconds


def duration_to_seconds(value: str) -> int:
    """Como parse_playback_time pero acepta horas > 23 (totales ya agregados)."""
    match = _DURATION_PATTERN.match(value or "")
    if not match:
        raise DurationFormatError(f"{value} is not a valid duration! Use HH:MM:SS format.")
    hours, minutes, seconds = (int(g) for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def format_duration(total_seconds: int) -> str:
    if total_seconds < 0:
        raise ValueError("duration cannot be negative")
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def topic_duration(playback_times: Iterable[str]) -> str:
    return format_duration(sum(parse_playback_time(t) for t in playback_times))


def course_duration(topic_durations: Iterable[str]) -> str:
    return format_duration(sum(duration_to_seconds(d) for d in topic_durations))
