"""
Decide to Run — Session State.

All per-chat state lives in one Session struct, and the only way to change
it is update(session, action), which returns the next session plus a list of
effects for the shell to run. Effects that produce data (offices, saved
progress, assistant replies) come back in as new actions through dispatch().

Persisting progress is the one effect nobody waits on: it is scheduled in the
background and the toggle is already visible by the time it starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Union

from decide_to_run.core import assistant, wizard
from decide_to_run.core.office_filters import filter_offices
from decide_to_run.core.progress import normalize_progress, toggle
from decide_to_run.data.models import (
    AssistantReply,
    ChatMessage,
    Office,
    OfficeFilters,
    PlanProgress,
    UserProfile,
)

if TYPE_CHECKING:
    from decide_to_run.core.progress import PlanProgressStore
    from decide_to_run.ports.office_port import OfficePort

logger = logging.getLogger(__name__)

VIEW_LANDING = "landing"
VIEW_WIZARD = "wizard"
VIEW_RESULTS = "results"
VIEW_PLAN = "plan"
VIEW_CHAT = "chat"


@dataclass
class Session:
    """Everything the shell knows about one conversation."""

    user_id: int | None = None
    view: str = VIEW_LANDING
    wizard_step: int = wizard.STEP_LOCATION
    profile: UserProfile = field(default_factory=UserProfile)
    offices: list[Office] = field(default_factory=list)
    filters: OfficeFilters = field(default_factory=OfficeFilters)
    selected_office: Office | None = None
    progress: PlanProgress = field(default_factory=dict)
    chat: list[ChatMessage] = field(default_factory=list)
    loading: bool = False

    @property
    def visible_offices(self) -> list[Office]:
        return filter_offices(self.offices, self.filters)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Begin:
    pass


@dataclass(frozen=True)
class SetLocation:
    zip_code: str
    state: str


@dataclass(frozen=True)
class SetEligibility:
    age: int | None
    citizenship: bool = True
    residency: bool = True


@dataclass(frozen=True)
class WizardNext:
    pass


@dataclass(frozen=True)
class WizardBack:
    pass


@dataclass(frozen=True)
class OfficesLoaded:
    offices: tuple[Office, ...]


@dataclass(frozen=True)
class SetFilters:
    level: str | None = None
    search_term: str | None = None
    sort_by: str | None = None


@dataclass(frozen=True)
class SelectOffice:
    office: Office


@dataclass(frozen=True)
class ProgressLoaded:
    office_id: str
    progress: PlanProgress | None


@dataclass(frozen=True)
class ToggleItem:
    item_id: str


@dataclass(frozen=True)
class SignedIn:
    user_id: int


@dataclass(frozen=True)
class SignedOut:
    pass


@dataclass(frozen=True)
class ShowResults:
    pass


@dataclass(frozen=True)
class OpenChat:
    pass


@dataclass(frozen=True)
class SendChat:
    text: str


@dataclass(frozen=True)
class AssistantAnswered:
    reply: AssistantReply


Action = Union[
    Begin, SetLocation, SetEligibility, WizardNext, WizardBack, OfficesLoaded,
    SetFilters, SelectOffice, ProgressLoaded, ToggleItem, SignedIn, SignedOut,
    ShowResults, OpenChat, SendChat, AssistantAnswered,
]


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadOffices:
    state: str


@dataclass(frozen=True)
class LoadProgress:
    user_id: int
    office_id: str


@dataclass(frozen=True)
class PersistProgress:
    user_id: int
    office_id: str
    progress: tuple[tuple[str, bool], ...]


@dataclass(frozen=True)
class AskAssistant:
    text: str


Effect = Union[LoadOffices, LoadProgress, PersistProgress, AskAssistant]


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------


def _load_progress_effects(session: Session) -> list[Effect]:
    if session.user_id is None or session.selected_office is None:
        return []
    return [LoadProgress(user_id=session.user_id, office_id=session.selected_office.id)]


def update(session: Session, action: Action) -> tuple[Session, list[Effect]]:
    """Compute the next session for an action. Never mutates the input."""
    if isinstance(action, Begin):
        return replace(session, view=VIEW_WIZARD, wizard_step=wizard.STEP_LOCATION), []

    if isinstance(action, SetLocation):
        profile = replace(
            session.profile,
            zip_code=wizard.normalize_zip(action.zip_code),
            state=action.state.strip().upper(),
        )
        return replace(session, profile=profile), []

    if isinstance(action, SetEligibility):
        profile = replace(
            session.profile,
            age=action.age,
            citizenship=action.citizenship,
            residency=action.residency,
        )
        return replace(session, profile=profile), []

    if isinstance(action, WizardNext):
        if session.loading or not wizard.can_proceed(session.wizard_step, session.profile):
            return session, []
        if session.wizard_step == wizard.LAST_STEP:
            return replace(session, loading=True), [LoadOffices(state=session.profile.state)]
        return replace(session, wizard_step=session.wizard_step + 1), []

    if isinstance(action, WizardBack):
        return replace(session, wizard_step=max(session.wizard_step - 1, 0)), []

    if isinstance(action, OfficesLoaded):
        return replace(
            session, offices=list(action.offices), view=VIEW_RESULTS, loading=False,
        ), []

    if isinstance(action, SetFilters):
        filters = replace(
            session.filters,
            level=action.level if action.level is not None else session.filters.level,
            search_term=(
                action.search_term if action.search_term is not None
                else session.filters.search_term
            ),
            sort_by=action.sort_by if action.sort_by is not None else session.filters.sort_by,
        )
        return replace(session, filters=filters), []

    if isinstance(action, SelectOffice):
        current = session.selected_office
        if current is not None and current.id == action.office.id:
            # Reopening the same plan keeps the ticks already on screen
            return replace(session, selected_office=action.office, view=VIEW_PLAN), []
        new_session = replace(
            session, selected_office=action.office, progress={}, view=VIEW_PLAN,
        )
        return new_session, _load_progress_effects(new_session)

    if isinstance(action, ProgressLoaded):
        selected = session.selected_office
        if selected is None or selected.id != action.office_id:
            logger.debug("Dropping stale progress for office %s", action.office_id)
            return session, []
        return replace(session, progress=normalize_progress(action.progress)), []

    if isinstance(action, ToggleItem):
        selected = session.selected_office
        if selected is None:
            return session, []
        progress = toggle(session.progress, action.item_id)
        new_session = replace(session, progress=progress)
        if session.user_id is None:
            return new_session, []
        return new_session, [PersistProgress(
            user_id=session.user_id,
            office_id=selected.id,
            progress=tuple(sorted(progress.items())),
        )]

    if isinstance(action, SignedIn):
        new_session = replace(session, user_id=action.user_id)
        return new_session, _load_progress_effects(new_session)

    if isinstance(action, SignedOut):
        return replace(session, user_id=None, progress={}), []

    if isinstance(action, ShowResults):
        return replace(session, view=VIEW_RESULTS), []

    if isinstance(action, OpenChat):
        return replace(session, view=VIEW_CHAT), []

    if isinstance(action, SendChat):
        text = action.text.strip()
        if not text:
            return session, []
        chat = [*session.chat, ChatMessage(role="user", content=text)]
        return replace(session, chat=chat), [AskAssistant(text=text)]

    if isinstance(action, AssistantAnswered):
        message = ChatMessage(
            role="assistant",
            content=action.reply.message,
            confidence=action.reply.confidence,
            related_questions=list(action.reply.related_questions),
        )
        return replace(session, chat=[*session.chat, message]), []

    raise TypeError(f"Unknown session action: {action!r}")


# ---------------------------------------------------------------------------
# Effect runner
# ---------------------------------------------------------------------------


@dataclass
class Runtime:
    """Collaborators the effect runner talks to."""

    offices: OfficePort
    progress_store: PlanProgressStore


async def _run_effect(effect: Effect, runtime: Runtime) -> Action | None:
    if isinstance(effect, LoadOffices):
        try:
            offices = await runtime.offices.list_by_state(effect.state)
        except Exception as exc:
            logger.error("Error fetching offices for %s: %s", effect.state, exc)
            offices = []
        return OfficesLoaded(offices=tuple(offices))

    if isinstance(effect, LoadProgress):
        progress = await runtime.progress_store.load(effect.user_id, effect.office_id)
        return ProgressLoaded(office_id=effect.office_id, progress=progress)

    if isinstance(effect, PersistProgress):
        runtime.progress_store.schedule_persist(
            effect.user_id, effect.office_id, dict(effect.progress),
        )
        return None

    if isinstance(effect, AskAssistant):
        return AssistantAnswered(reply=assistant.answer(effect.text))

    raise TypeError(f"Unknown session effect: {effect!r}")


async def dispatch(session: Session, action: Action, runtime: Runtime) -> Session:
    """Apply an action and run its effects until the session settles."""
    queue: list[Action] = [action]
    while queue:
        session, effects = update(session, queue.pop(0))
        for effect in effects:
            follow_up = await _run_effect(effect, runtime)
            if follow_up is not None:
                queue.append(follow_up)
    return session
