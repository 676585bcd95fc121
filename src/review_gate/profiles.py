"""Review profile loading (YAML) and runtime settings (environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .attachments import DEFAULT_ACCEPTED_TYPES, DEFAULT_MAX_BYTES, KNOWN_TYPES, AttachmentPolicy
from .errors import ProfileError
from .items import ItemKind
from .validators import is_known_rule

DEFAULT_PROFILES_PATH = Path(__file__).resolve().parent / "config" / "profiles.yaml"

_TRUTHY = {"1", "true", "yes", "on"}


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GateSettings:
    strict: bool = False
    profiles_path: Path = DEFAULT_PROFILES_PATH


def load_settings() -> GateSettings:
    """Read settings from the environment (and a .env file, if present).

    REVIEW_GATE_STRICT: truthy value makes invariant violations raise.
    REVIEW_GATE_PROFILES: path to an alternate profiles YAML.
    """
    load_dotenv()
    strict = os.environ.get("REVIEW_GATE_STRICT", "").strip().lower() in _TRUTHY
    profiles = os.environ.get("REVIEW_GATE_PROFILES")
    return GateSettings(
        strict=strict,
        profiles_path=Path(profiles) if profiles else DEFAULT_PROFILES_PATH,
    )


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldSpec:
    id: str
    rule: str
    label: str | None = None


@dataclass(frozen=True)
class DocumentSlot:
    id: str
    label: str | None = None


@dataclass
class ReviewProfile:
    """What one kind of review session collects and checks."""

    name: str
    description: str = ""
    item_kind: ItemKind = ItemKind.DOCUMENT
    fields: list[FieldSpec] = field(default_factory=list)
    documents: list[DocumentSlot] = field(default_factory=list)
    required_count: int = 0
    attachments: AttachmentPolicy = field(default_factory=AttachmentPolicy)

    @classmethod
    def from_dict(cls, name: str, raw: dict[str, Any]) -> ReviewProfile:
        if not isinstance(raw, dict):
            raise ProfileError(f"profile '{name}' must be a mapping, got {type(raw)}")

        try:
            item_kind = ItemKind(raw.get("item_kind", ItemKind.DOCUMENT.value))
        except ValueError as e:
            raise ProfileError(f"profile '{name}': unknown item_kind {raw.get('item_kind')!r}") from e

        fields = []
        for f in raw.get("fields") or []:
            if not isinstance(f, dict):
                raise ProfileError(f"profile '{name}': field must be a mapping")
            for required in ("id", "rule"):
                if required not in f:
                    raise ProfileError(f"profile '{name}': field missing required key: {required}")
            fields.append(FieldSpec(id=str(f["id"]), rule=str(f["rule"]), label=f.get("label")))

        documents = []
        for d in raw.get("documents") or []:
            if isinstance(d, str):
                documents.append(DocumentSlot(id=d))
            elif isinstance(d, dict) and "id" in d:
                documents.append(DocumentSlot(id=str(d["id"]), label=d.get("label")))
            else:
                raise ProfileError(f"profile '{name}': document slot needs an id")

        att = raw.get("attachments") or {}
        attachments = AttachmentPolicy(
            max_bytes=_as_int(name, "attachments.max_bytes", att.get("max_bytes", DEFAULT_MAX_BYTES)),
            accepted_types=tuple(
                str(t).lower() for t in att.get("accepted_types", DEFAULT_ACCEPTED_TYPES)
            ),
        )

        return cls(
            name=name,
            description=raw.get("description", ""),
            item_kind=item_kind,
            fields=fields,
            documents=documents,
            required_count=_as_int(name, "required_count", raw.get("required_count", 0)),
            attachments=attachments,
        )

    def validate(self) -> list[str]:
        """Returns list of errors (empty if valid)."""
        errors = []
        seen: set[str] = set()
        for item_id in [f.id for f in self.fields] + [d.id for d in self.documents]:
            if item_id in seen:
                errors.append(f"duplicate item id: {item_id}")
            seen.add(item_id)
        for f in self.fields:
            if not is_known_rule(f.rule):
                errors.append(f"field '{f.id}' uses unknown rule '{f.rule}'")
        if self.required_count < 0:
            errors.append("required_count must not be negative")
        if self.attachments.max_bytes <= 0:
            errors.append("attachments.max_bytes must be positive")
        for t in self.attachments.accepted_types:
            if t not in KNOWN_TYPES:
                errors.append(f"unknown attachment type: {t}")
        return errors

    @classmethod
    def load_all(cls, path: str | Path) -> dict[str, ReviewProfile]:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)

        profiles = (raw or {}).get("profiles")
        if not isinstance(profiles, dict) or not profiles:
            raise ProfileError("profiles file must have a non-empty top-level 'profiles' key")

        result = {}
        for name, body in profiles.items():
            profile = cls.from_dict(str(name), body)
            errors = profile.validate()
            if errors:
                raise ProfileError(f"profile '{name}' is invalid: {'; '.join(errors)}")
            result[profile.name] = profile
        return result


def load_profile(name: str, settings: GateSettings | None = None) -> ReviewProfile:
    """Load one named profile from the configured profiles file."""
    settings = settings or load_settings()
    profiles = ReviewProfile.load_all(settings.profiles_path)
    if name not in profiles:
        raise ProfileError(
            f"unknown profile '{name}' (available: {', '.join(sorted(profiles))})"
        )
    return profiles[name]


def _as_int(profile: str, key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ProfileError(f"profile '{profile}': {key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ProfileError(f"profile '{profile}': {key} must be an integer, got {value!r}") from e
