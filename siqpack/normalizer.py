#!/usr/bin/env python3
"""
# siqpack
# Licensed under the MIT License. See LICENSE in the project root.

normalizer.py

Turn a parsed package descriptor into the normalized Package model.

The descriptor grammar is loose: questions switch behaviour through an
optional <type>, scenarios mix literal text with media atoms, and media
references point into the archive through a substitution marker ("@img.jpg").
Everything here resolves those variants into one Question shape.

Precedence rules, applied in this order for each question:

    1. base        points=price, answers=<right>, mode=default, kind=plain
    2. comment     first <info><comments> replaces explanation
    3. type        cat/bagcat -> delegate; params cost/theme, last one wins
                   other names pass through verbatim
    4. scenario    one literal atom -> plain text
                   otherwise media: last text wins, images/sounds append,
                   last say wins, marker ignored, unknown types warned

Usage:
    from siqpack.descriptor import parse_descriptor
    from siqpack.normalizer import normalize

    package = normalize(parse_descriptor(Path("content.xml")))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from siqpack.descriptor import MediaAtom, MediaType, RawElement, TextAtom, iter_atoms
from siqpack.errors import (
    MalformedDescriptorError,
    describe_position,
    invalid_number_error,
    missing_node_error,
)
from siqpack.icons import log_warning
from siqpack.models import (
    KIND_MEDIA,
    KIND_PLAIN,
    MODE_AUCTION,
    MODE_DEFAULT,
    MODE_DELEGATE,
    MODE_SPONSORED,
    Metadata,
    Package,
    Question,
    Round,
    Task,
    Theme,
)


DELEGATE_TYPES = {"cat", "bagcat"}
KNOWN_PASS_THROUGH_MODES = {MODE_AUCTION, MODE_SPONSORED}

WarningHandler = Callable[[str], None]


def print_warning(message: str) -> None:
    print(log_warning(message, prefix="normalize:warn"))


# ============================================================================
# Asset Path Resolver
# ============================================================================

def resolve_asset_path(payload: str, asset_root: str, marker: str = "@") -> str:
    """
    Rewrite an in-descriptor reference to a path under an asset folder.

    "@img1.jpg" -> "Images/img1.jpg". References without the marker
    (external URLs) are returned unchanged.
    """
    if marker and payload.startswith(marker):
        return f"{asset_root}/{payload[len(marker):]}"
    return payload


# ============================================================================
# Question construction
# ============================================================================

@dataclass
class QuestionDraft:
    """Mutable working copy of a question while the rules are applied"""
    points: int
    answers: List[str]
    explanation: str = ""
    mode: str = MODE_DEFAULT
    kind: str = KIND_PLAIN
    text: str = ""
    images: List[str] = field(default_factory=list)
    sounds: List[str] = field(default_factory=list)

    def freeze(self) -> Question:
        return Question(
            points=self.points,
            mode=self.mode,
            kind=self.kind,
            answers=tuple(self.answers),
            task=Task(text=self.text, images=tuple(self.images), sounds=tuple(self.sounds)),
            explanation=self.explanation,
        )


def _parse_int(value: Optional[str], field_name: str, position: Dict[str, int]) -> int:
    if value is None:
        raise invalid_number_error(field_name, value, position)
    try:
        return int(value.strip())
    except ValueError:
        raise invalid_number_error(field_name, value, position)


class PackageNormalizer:
    """Walks a RawElement tree and builds a Package"""

    def __init__(
        self,
        images_root: str = "Images",
        audio_root: str = "Audio",
        marker: str = "@",
        on_warning: Optional[WarningHandler] = None,
    ):
        self.images_root = images_root
        self.audio_root = audio_root
        self.marker = marker
        self.on_warning = on_warning or print_warning

    # ------------------------------------------------------------------
    # Package level
    # ------------------------------------------------------------------

    def normalize(self, root: RawElement) -> Package:
        if root.tag != "package":
            raise MalformedDescriptorError(
                message=f"Descriptor root is <{root.tag}>, expected <package>",
                suggestion="Check that the archive's content.xml is a quiz package descriptor",
            )

        package_id = root.get("id") or ""
        name = root.get("name") or ""
        missing = [attr for attr, value in (("id", package_id), ("name", name)) if not value]
        if missing:
            raise MalformedDescriptorError(
                message=f"Package is missing required attribute(s): {', '.join(missing)}",
                context={"missing": missing},
            )

        rounds_el = root.find("rounds")
        if rounds_el is None:
            raise missing_node_error("rounds", "Package")

        rounds = tuple(
            self.build_round(round_el, r_idx)
            for r_idx, round_el in enumerate(rounds_el.findall("round"))
        )

        metadata = Metadata(
            version=root.get("version"),
            created_by=tuple(self.collect_authors(root)),
            difficulty=root.get("difficulty"),
            restriction=root.get("restriction"),
            created_at=root.get("date"),
        )
        return Package(id=package_id, name=name, rounds=rounds, metadata=metadata)

    @staticmethod
    def collect_authors(root: RawElement) -> List[str]:
        """Authors from the first <info> that has an <authors> list; later ones are ignored."""
        for info in root.findall("info"):
            authors_lists = info.findall("authors")
            if authors_lists:
                return [
                    author.text
                    for authors in authors_lists
                    for author in authors.findall("author")
                ]
        return []

    def build_round(self, round_el: RawElement, r_idx: int) -> Round:
        position = {"round": r_idx}
        themes_el = round_el.find("themes")
        if themes_el is None:
            raise missing_node_error("themes", "Round", position)
        themes = tuple(
            self.build_theme(theme_el, r_idx, t_idx)
            for t_idx, theme_el in enumerate(themes_el.findall("theme"))
        )
        return Round(name=round_el.get("name", ""), themes=themes)

    def build_theme(self, theme_el: RawElement, r_idx: int, t_idx: int) -> Theme:
        position = {"round": r_idx, "theme": t_idx}
        questions_el = theme_el.find("questions")
        if questions_el is None:
            raise missing_node_error("questions", "Theme", position)
        questions = tuple(
            self.build_question(q_el, {"round": r_idx, "theme": t_idx, "question": q_idx})
            for q_idx, q_el in enumerate(questions_el.findall("question"))
        )
        return Theme(name=theme_el.get("name", ""), questions=questions)

    # ------------------------------------------------------------------
    # Question level
    # ------------------------------------------------------------------

    def build_question(self, q_el: RawElement, position: Dict[str, int]) -> Question:
        scenario = q_el.find("scenario")
        if scenario is None:
            raise missing_node_error("scenario", "Question", position)
        right = q_el.find("right")
        if right is None:
            raise missing_node_error("right", "Question", position)

        draft = QuestionDraft(
            points=_parse_int(q_el.get("price"), "price", position),
            answers=[answer.text for answer in right.findall("answer")],
        )
        self.apply_comment(draft, q_el)
        self.apply_type(draft, q_el.find("type"), position)
        self.apply_scenario(draft, scenario, position)
        return draft.freeze()

    @staticmethod
    def apply_comment(draft: QuestionDraft, q_el: RawElement) -> None:
        info = q_el.find("info")
        if info is None:
            return
        comments = info.find("comments")
        if comments is not None:
            draft.explanation = comments.text

    def apply_type(self, draft: QuestionDraft, type_el: Optional[RawElement], position: Dict[str, int]) -> None:
        if type_el is None:
            return
        type_name = type_el.get("name")
        if type_name is None:
            return

        if type_name in DELEGATE_TYPES:
            draft.mode = MODE_DELEGATE
            for param in type_el.findall("param"):
                param_name = param.get("name")
                if param_name == "cost":
                    draft.points = _parse_int(param.text, "cost", position)
                elif param_name == "theme":
                    draft.explanation = param.text
            return

        if type_name not in KNOWN_PASS_THROUGH_MODES:
            self.on_warning(f"Unknown question type '{type_name}' kept as mode{describe_position(position)}")
        draft.mode = type_name

    def apply_scenario(self, draft: QuestionDraft, scenario: RawElement, position: Dict[str, int]) -> None:
        atoms = list(iter_atoms(scenario))

        if len(atoms) == 1 and isinstance(atoms[0], TextAtom):
            draft.kind = KIND_PLAIN
            draft.text = atoms[0].text
            return

        draft.kind = KIND_MEDIA
        for atom in atoms:
            if isinstance(atom, TextAtom):
                draft.text = atom.text
            else:
                self.apply_media_atom(draft, atom, position)

    def apply_media_atom(self, draft: QuestionDraft, atom: MediaAtom, position: Dict[str, int]) -> None:
        media_type = atom.media_type
        if media_type is MediaType.IMAGE:
            draft.images.append(resolve_asset_path(atom.payload, self.images_root, self.marker))
        elif media_type is MediaType.VOICE:
            draft.sounds.append(resolve_asset_path(atom.payload, self.audio_root, self.marker))
        elif media_type is MediaType.SAY:
            draft.explanation = atom.payload
        elif media_type is MediaType.MARKER:
            pass
        else:
            self.on_warning(f"Unknown media atom type '{atom.type_tag}' ignored{describe_position(position)}")


def normalize(
    root: RawElement,
    on_warning: Optional[WarningHandler] = None,
    images_root: str = "Images",
    audio_root: str = "Audio",
    marker: str = "@",
) -> Package:
    """
    Normalize a descriptor tree into a Package.

    Args:
        root: Parsed descriptor root (<package>)
        on_warning: Called with a message for each non-fatal oddity
            (unknown media atom type, unknown question type)
        images_root: Folder image references are rewritten under
        audio_root: Folder voice references are rewritten under
        marker: Prefix marking an in-archive reference

    Raises:
        MalformedDescriptorError: A required node is missing
    """
    normalizer = PackageNormalizer(
        images_root=images_root,
        audio_root=audio_root,
        marker=marker,
        on_warning=on_warning,
    )
    return normalizer.normalize(root)
