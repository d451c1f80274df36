#!/usr/bin/env python3
"""
models.py

Normalized quiz package model.

The normalizer builds these once per run; they are frozen afterwards and
only ever serialized. ``to_dict`` produces the JSON layout written to
content.json (key order is part of the format).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


MODE_DEFAULT = "default"
MODE_DELEGATE = "delegate"
MODE_AUCTION = "auction"
MODE_SPONSORED = "sponsored"

KIND_PLAIN = "plain"
KIND_MEDIA = "media"


@dataclass(frozen=True)
class Task:
    """What is shown to players: text plus ordered image/audio references"""
    text: str = ""
    images: Tuple[str, ...] = ()
    sounds: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "images": list(self.images),
            "sounds": list(self.sounds),
        }


@dataclass(frozen=True)
class Question:
    points: int
    mode: str
    kind: str
    answers: Tuple[str, ...]
    task: Task
    explanation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": self.points,
            "mode": self.mode,
            "kind": self.kind,
            "answers": list(self.answers),
            "task": self.task.to_dict(),
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class Theme:
    name: str
    questions: Tuple[Question, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "questions": [q.to_dict() for q in self.questions],
        }


@dataclass(frozen=True)
class Round:
    name: str
    themes: Tuple[Theme, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "themes": [t.to_dict() for t in self.themes],
        }


@dataclass(frozen=True)
class Metadata:
    version: Optional[str] = None
    created_by: Tuple[str, ...] = ()
    difficulty: Optional[str] = None
    restriction: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "version": self.version,
            "createdBy": list(self.created_by),
            "difficulty": self.difficulty,
            "restriction": self.restriction,
            "createdAt": self.created_at,
        }
        # Optional keys are omitted rather than written as null
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class Package:
    """Root of the normalized model"""
    id: str
    name: str
    rounds: Tuple[Round, ...] = ()
    metadata: Metadata = field(default_factory=Metadata)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "rounds": [r.to_dict() for r in self.rounds],
            "metadata": self.metadata.to_dict(),
        }

    def to_json(self) -> str:
        """Stable JSON text: same package, same bytes."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

    def iter_questions(self):
        """Yield (round_index, theme_index, question_index, question)."""
        for r_idx, rnd in enumerate(self.rounds):
            for t_idx, theme in enumerate(rnd.themes):
                for q_idx, question in enumerate(theme.questions):
                    yield r_idx, t_idx, q_idx, question
