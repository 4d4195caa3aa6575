"""
Decide to Run — Telegram Bot.

Telegram is the user interface: the eligibility wizard, the office list,
the campaign-plan checklist and the Q&A assistant all flow through this bot.

Handlers stay thin. Each one turns a Telegram update into a session action,
dispatches it, and renders the resulting session. Checklist toggles show up
immediately; saving them happens in the background.
"""

from __future__ import annotations

import io
import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Coroutine

from telegram import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    ReplyKeyboardMarkup,
    ReplyKeyboardRemove,
    Update,
)
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)

from decide_to_run.config import settings
from decide_to_run.core import assistant, wizard
from decide_to_run.core.office_filters import LEVELS, SORT_KEYS
from decide_to_run.core.plan_templates import classify_office, format_deadline, select_plan
from decide_to_run.core.progress import PlanProgressStore, compute_statistics, is_done
from decide_to_run.core.session import (
    Begin,
    OpenChat,
    Runtime,
    SelectOffice,
    SendChat,
    Session,
    SetEligibility,
    SetFilters,
    SetLocation,
    ShowResults,
    SignedIn,
    SignedOut,
    ToggleItem,
    WizardNext,
    dispatch,
)
from decide_to_run.data.models import PLAN_GROUPS, Office, Plan
from decide_to_run.ports.office_port import OfficeProviderError

if TYPE_CHECKING:
    from decide_to_run.core.session import Action
    from decide_to_run.data.db import UserDB
    from decide_to_run.ports.export_port import PlanExporter
    from decide_to_run.ports.office_port import OfficePort
    from decide_to_run.ports.progress_port import ProgressPort

logger = logging.getLogger(__name__)

# Telegram caps a button label well below the longest task text
_BUTTON_LABEL_MAX = 48


# ---------------------------------------------------------------------------
# Security: silent-ignore decorator
# ---------------------------------------------------------------------------


def _is_allowed(user_id: int | None) -> bool:
    if user_id is None:
        return False
    return not settings.ALLOWED_USER_IDS or user_id in settings.ALLOWED_USER_IDS


def authorized_only(
    func: Callable[..., Coroutine[Any, Any, Any]],
) -> Callable[..., Coroutine[Any, Any, Any]]:
    """Decorator that silently ignores updates from users outside the allowlist.

    An empty ALLOWED_USER_IDS opens the bot to everyone.
    """

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Any:
        user = update.effective_user
        if not _is_allowed(user.id if user else None):
            uid = user.id if user else "unknown"
            logger.warning("Unauthorized access attempt from user_id=%s", uid)
            return None  # Silent ignore
        return await func(update, context)

    return wrapper


# ---------------------------------------------------------------------------
# Session plumbing
# ---------------------------------------------------------------------------


def _session(context: ContextTypes.DEFAULT_TYPE) -> Session:
    session = context.user_data.get("session")
    if session is None:
        session = Session()
        context.user_data["session"] = session
    return session


def _runtime(context: ContextTypes.DEFAULT_TYPE) -> Runtime:
    return Runtime(
        offices=context.bot_data["offices"],
        progress_store=context.bot_data["progress_store"],
    )


async def _dispatch(context: ContextTypes.DEFAULT_TYPE, action: Action) -> Session:
    session = await dispatch(_session(context), action, _runtime(context))
    context.user_data["session"] = session
    return session


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _format_office_line(office: Office) -> str:
    level = (office.level or "other").capitalize()
    deadline = format_deadline(office.filing_deadline) or "TBD"
    line = f"• {office.title} [{level}] — filing deadline {deadline}"
    if office.estimated_cost:
        line += f", est. cost {office.estimated_cost}"
    if office.incumbent:
        line += f", incumbent {office.incumbent}"
    return line


def _format_office_list(offices: list[Office], header: str) -> str:
    if not offices:
        return f"{header}\n\nNo offices match. Try /filter level all or /filter search to clear the search."
    lines = [header, ""]
    lines += [_format_office_line(o) for o in offices]
    lines += ["", "Tap an office to view its campaign plan."]
    return "\n".join(lines)


def _offices_keyboard(offices: list[Office]) -> InlineKeyboardMarkup | None:
    if not offices:
        return None
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(o.title[:_BUTTON_LABEL_MAX] or o.id, callback_data=f"plan:{o.id}")]
        for o in offices
    ])


def _format_plan(office: Office, plan: Plan, progress: dict[str, bool]) -> str:
    stats = compute_statistics(plan, progress)
    category = classify_office(office).value
    lines = [
        f"YOUR CAMPAIGN PLAN: {office.title}",
        f"{office.state} - District {office.district} ({category})",
        f"Progress: {stats.completed}/{stats.total} ({stats.percentage}%)",
    ]
    for name, heading in PLAN_GROUPS:
        items = getattr(plan, name)
        if not items:
            continue
        lines += ["", heading]
        for item in items:
            mark = "✅" if is_done(progress, item.id) else "⬜"
            lines.append(f"{mark} {item.task} ({item.priority})")
    if plan.budget:
        lines += ["", "BUDGET BREAKDOWN"]
        lines += [f"{label}: {share}" for label, share in plan.budget.items()]
    return "\n".join(lines)


def _plan_keyboard(
    office: Office, plan: Plan, progress: dict[str, bool],
) -> InlineKeyboardMarkup:
    rows = []
    seen: set[str] = set()
    for item in plan.all_items():
        # One button per id: items sharing an id toggle together
        if item.id in seen:
            continue
        seen.add(item.id)
        mark = "✅" if is_done(progress, item.id) else "⬜"
        rows.append([InlineKeyboardButton(
            f"{mark} {item.task}"[:_BUTTON_LABEL_MAX],
            callback_data=f"toggle:{office.id}:{item.id}",
        )])
    return InlineKeyboardMarkup(rows)


def _format_reply(session: Session) -> str:
    message = session.chat[-1]
    text = message.content
    if message.confidence:
        text += f"\n\n({assistant.confidence_label(message.confidence)})"
    if message.related_questions:
        text += "\n\nYou might also ask:\n" + "\n".join(
            f"• {q}" for q in message.related_questions
        )
    return text


# ---------------------------------------------------------------------------
# Eligibility wizard (conversation)
# ---------------------------------------------------------------------------

(
    WIZ_ZIP,
    WIZ_STATE,
    WIZ_AGE,
    WIZ_CITIZEN,
    WIZ_RESIDENT,
) = range(5)

_YES_NO_KEYBOARD = ReplyKeyboardMarkup(
    [["Yes", "No"]], one_time_keyboard=True, resize_keyboard=True,
)


def _parse_yes_no(text: str) -> bool | None:
    answer = text.strip().lower()
    if answer in ("yes", "y"):
        return True
    if answer in ("no", "n"):
        return False
    return None


@authorized_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle /start — welcome message and first wizard step."""
    await _dispatch(context, Begin())
    await update.message.reply_text(
        "Welcome to *Decide to Run*!\n\n"
        "Discover what offices you can run for in your area and get the "
        "information you need to launch your campaign.\n\n"
        "Step 1 of 3 — Where are you located?\n"
        "What's your 5-digit ZIP code?",
        parse_mode="Markdown",
    )
    return WIZ_ZIP


async def wizard_zip(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive the ZIP code, ask for the state."""
    zip_code = wizard.normalize_zip(update.message.text)
    if len(zip_code) != 5:
        await update.message.reply_text("Please enter a 5-digit ZIP code (e.g., 94110).")
        return WIZ_ZIP
    context.user_data["wizard_zip"] = zip_code
    await update.message.reply_text(
        "Which state? Send the two-letter code (e.g., CA).",
        reply_markup=ReplyKeyboardMarkup(
            [["AL", "CA", "NY"], ["TX", "FL"]],
            one_time_keyboard=True,
            resize_keyboard=True,
        ),
    )
    return WIZ_STATE


async def wizard_state(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive the state, advance to the eligibility step."""
    state = update.message.text.strip().upper()
    if len(state) != 2 or not state.isalpha():
        await update.message.reply_text("Please send a two-letter state code (e.g., CA).")
        return WIZ_STATE

    await _dispatch(context, SetLocation(zip_code=context.user_data["wizard_zip"], state=state))
    session = await _dispatch(context, WizardNext())
    if session.wizard_step != wizard.STEP_ELIGIBILITY:
        await update.message.reply_text("Something looks off with that location. Send /start to try again.")
        _clear_wizard_data(context)
        return ConversationHandler.END

    await update.message.reply_text(
        "Step 2 of 3 — Basic eligibility.\nHow old are you?",
        reply_markup=ReplyKeyboardRemove(),
    )
    return WIZ_AGE


async def wizard_age(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive the age, ask about citizenship."""
    age = wizard.parse_age(update.message.text)
    if age is None:
        await update.message.reply_text("Please enter your age as a number (e.g., 34).")
        return WIZ_AGE
    context.user_data["wizard_age"] = age
    await update.message.reply_text("Are you a U.S. citizen?", reply_markup=_YES_NO_KEYBOARD)
    return WIZ_CITIZEN


async def wizard_citizen(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive citizenship, ask about residency."""
    citizen = _parse_yes_no(update.message.text)
    if citizen is None:
        await update.message.reply_text("Please answer Yes or No.", reply_markup=_YES_NO_KEYBOARD)
        return WIZ_CITIZEN
    context.user_data["wizard_citizen"] = citizen
    await update.message.reply_text(
        "Do you live in the area where you want to run?", reply_markup=_YES_NO_KEYBOARD,
    )
    return WIZ_RESIDENT


async def wizard_resident(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive residency, check eligibility and load offices."""
    resident = _parse_yes_no(update.message.text)
    if resident is None:
        await update.message.reply_text("Please answer Yes or No.", reply_markup=_YES_NO_KEYBOARD)
        return WIZ_RESIDENT

    await _dispatch(context, SetEligibility(
        age=context.user_data.get("wizard_age"),
        citizenship=context.user_data.get("wizard_citizen", False),
        residency=resident,
    ))
    session = await _dispatch(context, WizardNext())
    _clear_wizard_data(context)

    if session.wizard_step != wizard.STEP_CONFIRM:
        await update.message.reply_text(
            "Most offices require candidates to be at least 18, U.S. citizens, "
            "and residents of the area they represent. Send /start to try again.",
            reply_markup=ReplyKeyboardRemove(),
        )
        return ConversationHandler.END

    await update.message.reply_text(
        "Step 3 of 3 — Almost there! Looking up offices in your area...",
        reply_markup=ReplyKeyboardRemove(),
    )
    session = await _dispatch(context, WizardNext())
    await _send_results(update, session)
    return ConversationHandler.END


async def wizard_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Cancel the wizard."""
    _clear_wizard_data(context)
    await update.message.reply_text("Wizard cancelled.", reply_markup=ReplyKeyboardRemove())
    return ConversationHandler.END


def _clear_wizard_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Remove all wizard-related keys from user_data."""
    for k in ("wizard_zip", "wizard_age", "wizard_citizen"):
        context.user_data.pop(k, None)


async def _send_results(update: Update, session: Session) -> None:
    offices = session.visible_offices
    header = (
        f"Your Available Offices — {len(offices)} offices in "
        f"{session.profile.zip_code}, {session.profile.state}"
    )
    await update.message.reply_text(
        _format_office_list(offices, header),
        reply_markup=_offices_keyboard(offices),
    )


# ---------------------------------------------------------------------------
# Offices and plans
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "*Available commands:*\n"
        "/start — Find offices you can run for\n"
        "/offices — Show the office list again\n"
        "/filter level <all|federal|state|local> — Filter by level\n"
        "/filter search <text> — Search titles and incumbents\n"
        "/filter sort <deadline|title> — Change the sort order\n"
        "/plan — Show the campaign plan for the selected office\n"
        "/export — Download the plan as a Markdown checklist\n"
        "/login, /logout — Sign in to save your progress\n"
        "/save, /unsave, /saved — Manage saved offices\n"
        "/ask <question> — Ask the campaign Q&A assistant\n"
        "/help — Show this message",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_offices(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /offices — show the filtered office list."""
    session = await _dispatch(context, ShowResults())
    if not session.offices:
        await update.message.reply_text("No offices loaded yet. Send /start to search your area.")
        return
    await _send_results(update, session)


@authorized_only
async def cmd_filter(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /filter <level|search|sort> [value]."""
    args = context.args or []
    if not args:
        f = _session(context).filters
        await update.message.reply_text(
            f"Current filters: level={f.level}, search='{f.search_term}', sort={f.sort_by}\n"
            "Usage: /filter level <all|federal|state|local>, "
            "/filter search <text>, /filter sort <deadline|title>"
        )
        return

    kind, value = args[0].lower(), " ".join(args[1:])
    if kind == "level" and value.lower() in LEVELS:
        action = SetFilters(level=value.lower())
    elif kind == "sort" and value.lower() in SORT_KEYS:
        action = SetFilters(sort_by=value.lower())
    elif kind == "search":
        action = SetFilters(search_term=value)
    else:
        await update.message.reply_text(
            f"Unknown filter. Levels: {', '.join(LEVELS)}. Sort: {', '.join(SORT_KEYS)}."
        )
        return

    await _dispatch(context, action)
    session = await _dispatch(context, ShowResults())
    await _send_results(update, session)


async def _find_office(context: ContextTypes.DEFAULT_TYPE, office_id: str) -> Office | None:
    for office in _session(context).offices:
        if office.id == office_id:
            return office
    offices: OfficePort = context.bot_data["offices"]
    return await offices.get_office(office_id)


async def _handle_plan_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Handle an office button tap — select it and show its plan."""
    query = update.callback_query
    await query.answer()

    user = query.from_user
    if not _is_allowed(user.id if user else None):
        return

    office_id = query.data.split(":", 1)[1]
    try:
        office = await _find_office(context, office_id)
    except OfficeProviderError as exc:
        logger.error("Plan lookup error for office %s: %s", office_id, exc)
        await query.edit_message_text("Couldn't load that office. Please try again.")
        return
    if office is None:
        await query.edit_message_text("That office is no longer available.")
        return

    session = await _dispatch(context, SelectOffice(office=office))
    plan = select_plan(office)
    await query.message.reply_text(
        _format_plan(office, plan, session.progress),
        reply_markup=_plan_keyboard(office, plan, session.progress),
    )


async def _handle_toggle_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Handle a checklist button tap — flip the item and redraw the plan."""
    query = update.callback_query
    await query.answer()

    user = query.from_user
    if not _is_allowed(user.id if user else None):
        return

    if _session(context).selected_office is None:
        await query.edit_message_text("This plan has expired. Pick an office from /offices.")
        return

    # Item ids never contain ":", office ids might
    office_id, _, item_id = query.data.split(":", 1)[1].rpartition(":")
    if office_id != _session(context).selected_office.id:
        logger.info("Ignoring toggle for office %s; current plan is another office", office_id)
        await query.message.reply_text(
            "That checklist is out of date. Tap the office again in /offices to reopen it."
        )
        return

    session = await _dispatch(context, ToggleItem(item_id=item_id))
    office = session.selected_office
    plan = select_plan(office)
    await query.edit_message_text(
        _format_plan(office, plan, session.progress),
        reply_markup=_plan_keyboard(office, plan, session.progress),
    )


@authorized_only
async def cmd_plan(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /plan — show the plan for the selected office."""
    session = _session(context)
    office = session.selected_office
    if office is None:
        await update.message.reply_text("Pick an office first — use /offices.")
        return
    plan = select_plan(office)
    await update.message.reply_text(
        _format_plan(office, plan, session.progress),
        reply_markup=_plan_keyboard(office, plan, session.progress),
    )


@authorized_only
async def cmd_export(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export — send the plan as a Markdown checklist file."""
    session = _session(context)
    office = session.selected_office
    if office is None:
        await update.message.reply_text("Pick an office first — use /offices.")
        return

    exporter: PlanExporter = context.bot_data["exporter"]
    document = exporter.render(office, select_plan(office), session.progress)
    await update.message.reply_document(
        document=io.BytesIO(document.encode("utf-8")),
        filename=f"campaign-plan-{office.id}.md",
        caption=f"Campaign plan: {office.title}",
    )


# ---------------------------------------------------------------------------
# Sign-in and saved offices
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_login(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /login — register the Telegram user and restore saved progress."""
    user = update.effective_user
    user_db: UserDB = context.bot_data["user_db"]
    try:
        record = user_db.get_or_create_user(user.id, user.first_name or str(user.id))
    except Exception as exc:
        logger.error("/login error: %s", exc)
        await update.message.reply_text("Couldn't sign you in. Please try again.")
        return

    session = await _dispatch(context, SignedIn(user_id=record.telegram_user_id))
    msg = f"Signed in as {record.display_name}. Your checklist progress will be saved."
    if session.selected_office is not None:
        stats = compute_statistics(select_plan(session.selected_office), session.progress)
        msg += f"\nRestored progress: {stats.completed}/{stats.total} ({stats.percentage}%)."
    await update.message.reply_text(msg)


@authorized_only
async def cmd_logout(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /logout — stop saving progress and clear the local checklist."""
    await _dispatch(context, SignedOut())
    await update.message.reply_text("Signed out. Checklist progress is no longer saved.")


async def _require_login(update: Update, session: Session) -> bool:
    if session.user_id is None:
        await update.message.reply_text("Please /login first.")
        return False
    return True


@authorized_only
async def cmd_save(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /save — bookmark the selected office."""
    session = _session(context)
    if not await _require_login(update, session):
        return
    if session.selected_office is None:
        await update.message.reply_text("Pick an office first — use /offices.")
        return

    offices: OfficePort = context.bot_data["offices"]
    try:
        await offices.save_office(session.user_id, session.selected_office.id)
    except OfficeProviderError as exc:
        logger.error("/save error: %s", exc)
        await update.message.reply_text("Couldn't save that office. Please try again.")
        return
    await update.message.reply_text(f"⭐ Saved {session.selected_office.title}.")


@authorized_only
async def cmd_unsave(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /unsave — remove the selected office's bookmark."""
    session = _session(context)
    if not await _require_login(update, session):
        return
    if session.selected_office is None:
        await update.message.reply_text("Pick an office first — use /offices or /saved.")
        return

    offices: OfficePort = context.bot_data["offices"]
    try:
        await offices.unsave_office(session.user_id, session.selected_office.id)
    except OfficeProviderError as exc:
        logger.error("/unsave error: %s", exc)
        await update.message.reply_text("Couldn't remove that office. Please try again.")
        return
    await update.message.reply_text(f"Removed {session.selected_office.title} from saved offices.")


@authorized_only
async def cmd_saved(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /saved — list bookmarked offices."""
    session = _session(context)
    if not await _require_login(update, session):
        return

    offices: OfficePort = context.bot_data["offices"]
    try:
        saved = await offices.list_saved(session.user_id)
    except OfficeProviderError as exc:
        logger.error("/saved error: %s", exc)
        await update.message.reply_text("Couldn't load saved offices. Please try again.")
        return

    if not saved:
        await update.message.reply_text("No saved offices yet. Open a plan and send /save.")
        return
    await update.message.reply_text(
        _format_office_list(saved, "Your saved offices:"),
        reply_markup=_offices_keyboard(saved),
    )


# ---------------------------------------------------------------------------
# Q&A assistant
# ---------------------------------------------------------------------------


async def _ask(update: Update, context: ContextTypes.DEFAULT_TYPE, text: str) -> None:
    before = len(_session(context).chat)
    await _dispatch(context, OpenChat())
    session = await _dispatch(context, SendChat(text=text))
    if len(session.chat) == before:
        return
    await update.effective_message.reply_text(_format_reply(session))


@authorized_only
async def cmd_ask(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /ask <question> — or offer suggested topics when empty."""
    question = " ".join(context.args or [])
    if not question.strip():
        keyboard = InlineKeyboardMarkup([
            [InlineKeyboardButton(topic, callback_data=f"topic:{idx}")]
            for idx, topic in enumerate(assistant.SUGGESTED_TOPICS)
        ])
        await update.message.reply_text(
            "Campaign Q&A Assistant — ask me anything about running for office.\n"
            "Try asking about:",
            reply_markup=keyboard,
        )
        return
    await _ask(update, context, question)


async def _handle_topic_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Handle a suggested-topic button tap."""
    query = update.callback_query
    await query.answer()

    user = query.from_user
    if not _is_allowed(user.id if user else None):
        return

    idx = int(query.data.split(":", 1)[1])
    if idx >= len(assistant.SUGGESTED_TOPICS):
        return
    await _ask(update, context, assistant.topic_prompt(assistant.SUGGESTED_TOPICS[idx]))


@authorized_only
async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text messages — route them to the Q&A assistant."""
    await _ask(update, context, update.message.text or "")


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


async def _drain_pending_saves(app: Application) -> None:
    """post_shutdown hook: finish queued progress saves before the loop closes."""
    store: PlanProgressStore | None = app.bot_data.get("progress_store")
    if store is not None:
        await store.drain()
        logger.info("Pending progress saves flushed")


def build_app(
    offices: OfficePort | None = None,
    progress: ProgressPort | None = None,
    exporter: PlanExporter | None = None,
    user_db: UserDB | None = None,
) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        offices: Office port implementation. Defaults to the OFFICE_BACKEND adapter.
        progress: Progress port implementation. Defaults to the PROGRESS_BACKEND adapter.
        exporter: Plan exporter. Defaults to MarkdownPlanExporter.
        user_db: User registry. Defaults to the local SQLite UserDB.
    """
    app = (
        ApplicationBuilder()
        .token(settings.TELEGRAM_BOT_TOKEN)
        .post_shutdown(_drain_pending_saves)
        .build()
    )

    # Wire default adapters if not provided
    if offices is None:
        from decide_to_run.adapters.store_factory import create_office_adapter
        offices = create_office_adapter()

    if progress is None:
        from decide_to_run.adapters.store_factory import create_progress_adapter
        progress = create_progress_adapter()

    if exporter is None:
        from decide_to_run.adapters.markdown_export import MarkdownPlanExporter
        exporter = MarkdownPlanExporter()

    if user_db is None:
        from decide_to_run.data.db import UserDB
        user_db = UserDB()

    # Store ports in bot_data for handler access
    app.bot_data["offices"] = offices
    app.bot_data["progress_store"] = PlanProgressStore(progress)
    app.bot_data["exporter"] = exporter
    app.bot_data["user_db"] = user_db

    # Wizard conversation handler
    _text = filters.TEXT & ~filters.COMMAND
    wizard_conv = ConversationHandler(
        entry_points=[CommandHandler("start", cmd_start)],
        states={
            WIZ_ZIP: [MessageHandler(_text, wizard_zip)],
            WIZ_STATE: [MessageHandler(_text, wizard_state)],
            WIZ_AGE: [MessageHandler(_text, wizard_age)],
            WIZ_CITIZEN: [MessageHandler(_text, wizard_citizen)],
            WIZ_RESIDENT: [MessageHandler(_text, wizard_resident)],
        },
        fallbacks=[CommandHandler("cancel", wizard_cancel)],
    )
    app.add_handler(wizard_conv)

    # Commands
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("offices", cmd_offices))
    app.add_handler(CommandHandler("filter", cmd_filter))
    app.add_handler(CommandHandler("plan", cmd_plan))
    app.add_handler(CommandHandler("export", cmd_export))
    app.add_handler(CommandHandler("login", cmd_login))
    app.add_handler(CommandHandler("logout", cmd_logout))
    app.add_handler(CommandHandler("save", cmd_save))
    app.add_handler(CommandHandler("unsave", cmd_unsave))
    app.add_handler(CommandHandler("saved", cmd_saved))
    app.add_handler(CommandHandler("ask", cmd_ask))
    app.add_handler(CallbackQueryHandler(_handle_plan_callback, pattern=r"^plan:.+$"))
    app.add_handler(CallbackQueryHandler(_handle_toggle_callback, pattern=r"^toggle:.+:.+$"))
    app.add_handler(CallbackQueryHandler(_handle_topic_callback, pattern=r"^topic:\d+$"))

    # Text messages (non-command) go to the assistant
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting Decide to Run bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
