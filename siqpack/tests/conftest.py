# siqpack/tests/conftest.py
"""
Pytest configuration and shared fixtures for siqpack tests
"""
import io
import sys
import zipfile
from pathlib import Path
from typing import Dict, Union

import pytest
from PIL import Image

# Ensure siqpack package is importable when running from a checkout
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from siqpack.descriptor import parse_descriptor_bytes  # noqa: E402


NS = "http://vladimirkhil.com/ygpackage3.0.xsd"


def make_descriptor(
    rounds_xml: str,
    info_xml: str = "<info><authors><author>Alice</author></authors></info>",
    attrs: str = 'name="Test Pack" version="4" id="pkg-1" date="01.02.2020"',
) -> str:
    """Wrap round markup in a complete <package> descriptor."""
    return (
        f'<?xml version="1.0" encoding="utf-8"?>\n'
        f'<package {attrs} xmlns="{NS}">'
        f"{info_xml}"
        f"<rounds>{rounds_xml}</rounds>"
        f"</package>"
    )


def single_question(question_xml: str, round_name: str = "Round 1", theme_name: str = "Theme A") -> str:
    """Descriptor holding exactly one question."""
    return make_descriptor(
        f'<round name="{round_name}"><themes>'
        f'<theme name="{theme_name}"><questions>{question_xml}</questions></theme>'
        f"</themes></round>"
    )


def parse(xml: str):
    return parse_descriptor_bytes(xml.encode("utf-8"))


def png_bytes(size=(64, 64), color=(200, 30, 30)) -> bytes:
    """Uncompressed PNG, so the optimizer always finds something to save."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG", compress_level=0)
    return buf.getvalue()


def jpeg_bytes(size=(64, 64), color=(20, 120, 220)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="JPEG", quality=100)
    return buf.getvalue()


def write_siq(path: Path, entries: Dict[str, Union[str, bytes]]) -> Path:
    """Write a package archive; str values are stored as UTF-8 text."""
    with zipfile.ZipFile(path, "w", zipfile.ZIP_STORED) as zf:
        for name, data in entries.items():
            if isinstance(data, str):
                data = data.encode("utf-8")
            zf.writestr(name, data)
    return path


def write_corrupt_deflated(path: Path, name: str, data: str) -> Path:
    """Write a one-entry deflated archive whose compressed stream is garbage."""
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(name, data.encode("utf-8"))
        offset = zf.getinfo(name).header_offset

    raw = bytearray(path.read_bytes())
    # Local file header: 30 fixed bytes, then the name and extra field
    name_len = int.from_bytes(raw[offset + 26:offset + 28], "little")
    extra_len = int.from_bytes(raw[offset + 28:offset + 30], "little")
    start = offset + 30 + name_len + extra_len
    raw[start:start + 8] = b"\xff" * 8
    path.write_bytes(bytes(raw))
    return path


SAMPLE_QUESTIONS = (
    '<question price="100">'
    "<scenario><atom>What is 2+2?</atom></scenario>"
    "<right><answer>4</answer></right>"
    "</question>"
    '<question price="200">'
    '<scenario><atom type="image">@red square.png</atom><atom>Which color?</atom></scenario>'
    "<right><answer>Red</answer></right>"
    "</question>"
)


@pytest.fixture
def sample_descriptor() -> str:
    return single_question(SAMPLE_QUESTIONS)


@pytest.fixture
def sample_siq(tmp_path: Path, sample_descriptor: str) -> Path:
    """A small but complete package: descriptor, manifest, texts, images, audio."""
    return write_siq(tmp_path / "quiz.siq", {
        "content.xml": sample_descriptor,
        "[Content_Types].xml": '<?xml version="1.0"?><Types/>',
        "Texts/authors.xml": "<Authors/>",
        "Images/red%20square.png": png_bytes(),
        "Images/photo.jpg": jpeg_bytes(),
        "Audio/tune.mp3": b"ID3" + b"\x00" * 256,
    })
