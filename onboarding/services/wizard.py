"""Multi-step intake wizard.

A WizardSession walks one restaurant owner through ten fixed steps while
accumulating a Draft. Validation never blocks navigation: field types are
checked when a value is written, and soft issues are reported through
step_warnings() for display only. Leaving the last step hands the draft to
the submit callable exactly once; on success the session starts over, on
failure the draft and position are kept so the user can retry.
"""
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, Field

from onboarding.metrics import WIZARD_SESSIONS_ACTIVE
from onboarding.models.draft import MIN_DEALS_SUGGESTED, Draft, UploadedFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Step:
    id: str
    title: str
    section: str    # Draft attribute edited on this step


STEPS: tuple[Step, ...] = (
    Step("business_info", "Business Info", "business_info"),
    Step("about", "About Us", "about"),
    Step("dishes", "Popular Dishes", "dishes"),
    Step("deals", "Deals & Offers", "deals"),
    Step("menu", "Menu Upload", "menus"),
    Step("hours_delivery", "Delivery & Hours", "delivery_hours"),
    Step("photos", "Photos", "photos"),
    Step("fonts", "Fonts & Style", "fonts"),
    Step("faqs", "FAQs", "faqs"),
    Step("social", "Social & Extras", "social"),
)
LAST_STEP = len(STEPS) - 1
STEP_IDS = [step.id for step in STEPS]

OBJECT_SECTIONS = {"business_info", "about", "delivery_hours", "fonts", "social"}
LIST_SECTIONS = {"dishes", "deals", "menus", "faqs"}
FILE_FIELDS = {"logo", "hero_image", "about_image", "image", "file"}

SubmitFn = Callable[[Draft], Awaitable[str]]


class StepConfig(BaseModel):
    """Per-step settings. Fields listed here only produce warnings."""
    required_fields: list[str] = Field(default_factory=list)


DEFAULT_STEP_CONFIG: dict[str, StepConfig] = {step.id: StepConfig() for step in STEPS}


class WizardBusyError(Exception):
    """Raised when a session is used while its submission is in flight."""


class WizardSessionNotFoundError(Exception):
    """Raised for unknown or expired session ids."""


class WizardFieldError(ValueError):
    """Raised for an unknown section, field path or step."""


class WizardSession:
    """State of one wizard run: current step, completed steps and the draft."""

    def __init__(
        self,
        session_id: str,
        submit: SubmitFn,
        step_config: Optional[dict[str, StepConfig]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize a wizard session.

        Args:
            session_id: Opaque session identifier
            submit: Terminal action, receives the draft and returns a submission id
            step_config: Optional per-step configuration
            clock: Monotonic clock used for idle expiry
        """
        self.session_id = session_id
        self.step_config = step_config or DEFAULT_STEP_CONFIG
        self._submit = submit
        self._clock = clock
        self._submitting = False
        self.last_submission_id: Optional[str] = None
        self.last_error: Optional[str] = None
        self.last_active = clock()
        self._reset()

    def _reset(self) -> None:
        self.current = 0
        self.completed_steps: set[int] = set()
        self.draft = Draft()

    @property
    def submitting(self) -> bool:
        return self._submitting

    def touch(self) -> None:
        self.last_active = self._clock()

    def _ensure_idle(self) -> None:
        if self._submitting:
            raise WizardBusyError(f"session {self.session_id} is submitting")

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    async def next(self) -> Optional[str]:
        """Advance one step, or submit when on the last step.

        Returns:
            The new submission id when this call submitted, else None

        Raises:
            WizardBusyError: If a submission is already running
            Exception: Whatever the submit action raised; state is kept
        """
        self._ensure_idle()
        self.touch()
        self.completed_steps.add(self.current)

        if self.current < LAST_STEP:
            self.current += 1
            return None

        self._submitting = True
        try:
            submission_id = await self._submit(self.draft)
        except Exception as e:
            self.last_error = str(e)
            logger.warning(f"[Wizard] Session {self.session_id} submit failed, draft kept: {e}")
            raise
        finally:
            self._submitting = False

        logger.info(f"[Wizard] Session {self.session_id} submitted {submission_id}")
        self._reset()
        self.last_submission_id = submission_id
        self.last_error = None
        return submission_id

    def back(self) -> None:
        self._ensure_idle()
        self.touch()
        if self.current > 0:
            self.current -= 1

    def go_to(self, step: int | str) -> None:
        """Jump to a step by index or id (progress indicator navigation)."""
        self._ensure_idle()
        if isinstance(step, str) and not step.isdigit():
            if step not in STEP_IDS:
                raise WizardFieldError(f"unknown step {step!r}")
            index = STEP_IDS.index(step)
        else:
            index = int(step)
        if not 0 <= index <= LAST_STEP:
            raise WizardFieldError(f"step index out of range: {index}")
        self.touch()
        self.current = index

    # -------------------------------------------------------------------------
    # Draft edits
    # -------------------------------------------------------------------------

    def update_field(self, section: str, value: Any) -> None:
        """Merge a partial value into one draft section.

        Object sections take a dict merged over the current values; list
        sections take the full new list. File fields are not writable here
        (use attach_file); list items keep the files of the current item
        with the same id.

        Raises:
            WizardFieldError: Unknown section or field, or wrong value shape
            pydantic.ValidationError: Field-level type checks failed
        """
        self._ensure_idle()
        self.touch()

        if section in OBJECT_SECTIONS:
            if not isinstance(value, dict):
                raise WizardFieldError(f"section {section!r} expects an object")
            merged = _merge_object(_raw(getattr(self.draft, section)), value)
            setattr(self.draft, section, merged)
        elif section in LIST_SECTIONS:
            if not isinstance(value, list):
                raise WizardFieldError(f"section {section!r} expects a list")
            merged = _merge_list(_raw(getattr(self.draft, section)), value)
            setattr(self.draft, section, merged)
        elif section == "photos":
            raise WizardFieldError("photos are added and removed as file uploads")
        else:
            raise WizardFieldError(f"unknown section {section!r}")

    def attach_file(self, path: str, file: UploadedFile) -> None:
        """Store an upload at a dotted path.

        Paths look like "business_info.logo", "dishes.0.image",
        "menus.1.file" or "about.custom_sections.0.image". "photos" appends
        to the gallery; "photos.N" replaces one photo.
        """
        self._ensure_idle()
        self.touch()
        self._set_file(path, file)

    def remove_file(self, path: str) -> None:
        self._ensure_idle()
        self.touch()
        self._set_file(path, None)

    def _set_file(self, path: str, file: Optional[UploadedFile]) -> None:
        section, *rest = path.split(".")

        if section == "photos":
            photos = list(self.draft.photos)
            if not rest:
                if file is None:
                    raise WizardFieldError("photo index required to remove a photo")
                photos.append(file)
            elif len(rest) == 1:
                index = _index(rest[0], photos)
                if file is None:
                    del photos[index]
                else:
                    photos[index] = file
            else:
                raise WizardFieldError(f"invalid file path {path!r}")
            self.draft.photos = photos
            return

        if section not in OBJECT_SECTIONS | LIST_SECTIONS or not rest:
            raise WizardFieldError(f"invalid file path {path!r}")

        raw = _raw(getattr(self.draft, section))
        container = raw
        for part in rest[:-1]:
            container = _child(container, part)

        leaf = rest[-1]
        if not isinstance(container, dict) or leaf not in container or leaf not in FILE_FIELDS:
            raise WizardFieldError(f"{path!r} is not a file field")

        container[leaf] = file
        setattr(self.draft, section, raw)

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def step_warnings(self, step: Optional[int] = None) -> list[str]:
        """Soft validation messages for a step (defaults to the current one)."""
        index = self.current if step is None else step
        step_id = STEPS[index].id
        warnings = []

        if step_id == "deals" and len(self.draft.deals) < MIN_DEALS_SUGGESTED:
            warnings.append(f"We suggest adding at least {MIN_DEALS_SUGGESTED} deals.")

        if step_id == "menu":
            for i, menu in enumerate(self.draft.menus):
                if menu.category == "custom" and not (menu.custom_category_name or "").strip():
                    warnings.append(f"Menu {i + 1} needs a name for its custom category.")
                if menu.file is None:
                    warnings.append(f"Menu {i + 1} has no file attached.")

        config = self.step_config.get(step_id)
        if config is not None:
            for field_path in config.required_fields:
                if _is_empty(self._lookup(field_path)):
                    warnings.append(f"{field_path} is required.")

        return warnings

    def _lookup(self, field_path: str) -> Any:
        value: Any = self.draft
        for part in field_path.split("."):
            if isinstance(value, list):
                try:
                    value = value[int(part)]
                except (ValueError, IndexError):
                    return None
            else:
                value = getattr(value, part, None)
            if value is None:
                return None
        return value

    def state(self) -> dict:
        """JSON-safe view of the session for the client."""
        return {
            "session_id": self.session_id,
            "current_step": self.current,
            "step": {"id": STEPS[self.current].id, "title": STEPS[self.current].title},
            "steps": [
                {"index": i, "id": s.id, "title": s.title, "section": s.section, "completed": i in self.completed_steps}
                for i, s in enumerate(STEPS)
            ],
            "is_last_step": self.current == LAST_STEP,
            "submitting": self._submitting,
            "warnings": self.step_warnings(),
            "draft": self.draft.to_public_dict(),
            "last_submission_id": self.last_submission_id,
            "last_error": self.last_error,
        }


class WizardSessionRegistry:
    """In-memory session store with idle expiry. Sessions do not survive restarts."""

    def __init__(
        self,
        submit: SubmitFn,
        ttl_seconds: float,
        step_config: Optional[dict[str, StepConfig]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._submit = submit
        self.ttl_seconds = ttl_seconds
        self.step_config = step_config
        self._clock = clock
        self._sessions: dict[str, WizardSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> WizardSession:
        session_id = uuid.uuid4().hex
        session = WizardSession(session_id, self._submit, self.step_config, self._clock)
        self._sessions[session_id] = session
        WIZARD_SESSIONS_ACTIVE.set(len(self._sessions))
        logger.info(f"[Wizard] Created session {session_id}")
        return session

    def get(self, session_id: str) -> WizardSession:
        session = self._sessions.get(session_id)
        if session is None or self._expired(session):
            raise WizardSessionNotFoundError(session_id)
        return session

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        WIZARD_SESSIONS_ACTIVE.set(len(self._sessions))

    def _expired(self, session: WizardSession) -> bool:
        return not session.submitting and self._clock() - session.last_active > self.ttl_seconds

    def sweep_expired(self) -> int:
        """Drop idle sessions. Sessions with a submission in flight are kept."""
        expired = [sid for sid, s in self._sessions.items() if self._expired(s)]
        for session_id in expired:
            del self._sessions[session_id]
        WIZARD_SESSIONS_ACTIVE.set(len(self._sessions))
        if expired:
            logger.info(f"[Wizard] Swept {len(expired)} idle session(s), {len(self._sessions)} remain")
        return len(expired)


def _raw(value: Any) -> Any:
    """Models to plain dicts/lists, keeping UploadedFile instances intact."""
    if isinstance(value, UploadedFile):
        return value
    if isinstance(value, BaseModel):
        return {name: _raw(getattr(value, name)) for name in type(value).model_fields}
    if isinstance(value, list):
        return [_raw(v) for v in value]
    return value


def _merge_object(current: dict, incoming: dict) -> dict:
    for key, value in incoming.items():
        if key not in current:
            raise WizardFieldError(f"unknown field {key!r}")
        if key in FILE_FIELDS:
            raise WizardFieldError(f"{key!r} is a file field; upload it instead")
        if isinstance(current[key], list) and isinstance(value, list):
            current[key] = _merge_list(current[key], value)
        else:
            current[key] = value
    return current


def _merge_list(current: list, incoming: list) -> list:
    """Replace a list, carrying each item's files over by its id.

    Items without an id, or with an id not in the current list, start
    without files. A repeated id only keeps its files on the first item.
    """
    by_id = {item["id"]: item for item in current if isinstance(item, dict) and item.get("id")}
    seen: set[str] = set()
    merged = []
    for item in incoming:
        if not isinstance(item, dict):
            raise WizardFieldError("list items must be objects")
        item = {k: v for k, v in item.items() if k not in FILE_FIELDS}
        item_id = item.get("id")
        if item_id in seen:
            del item["id"]
        elif item_id in by_id:
            seen.add(item_id)
            for key in FILE_FIELDS & by_id[item_id].keys():
                item[key] = by_id[item_id][key]
        merged.append(item)
    return merged


def _child(container: Any, part: str) -> Any:
    if isinstance(container, list):
        return container[_index(part, container)]
    if isinstance(container, dict) and part in container:
        return container[part]
    raise WizardFieldError(f"unknown field {part!r}")


def _index(part: str, items: list) -> int:
    if not part.isdigit() or int(part) >= len(items):
        raise WizardFieldError(f"no item at index {part!r}")
    return int(part)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return not value
    return False
