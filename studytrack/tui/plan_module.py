"""
Plans Module

CRUD over learning plans. States:

  list    --enter--> detail (loads the plan)
  list    --n------> create
  list    --d------> confirm
  detail  --e------> edit
  detail  --d------> confirm
  detail  --space--> toggle chunk status, reload
  edit/create --enter--> save; create returns to list, edit to detail
  edit/create --esc----> list
  confirm --enter--> delete, then list
  confirm --esc----> back to whichever state opened it
"""

from dataclasses import dataclass
from typing import List, Optional

from rich.text import Text

from studytrack.models.plan import Plan, PlanRecord, Status, next_chunk_status
from studytrack.services.store import PlanService
from studytrack.tui.components.table import Table
from studytrack.tui.messages import (
    KeyMsg, ModuleActivatedMsg, TOPIC_PLANS_CHANGED,
    batch, broadcast_cmd, status_cmd,
)
from studytrack.tui.module import Module, Shortcut
from studytrack.tui.theme import Theme
from studytrack.utils.exceptions import ValidationError
from studytrack.utils.logger import get_logger
from studytrack.utils.validators import CreatePlanRequest, UpdatePlanRequest, validate_request

logger = get_logger("tui.plans")

STATE_LIST = 'list'
STATE_DETAIL = 'detail'
STATE_EDIT = 'edit'
STATE_CREATE = 'create'
STATE_CONFIRM = 'confirm'


# ============================================================================
# COMPLETION MESSAGES
# ============================================================================

@dataclass(frozen=True)
class PlansLoadedMsg:
    records: Optional[List[PlanRecord]] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class PlanLoadedMsg:
    plan_id: str
    plan: Optional[Plan] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class PlanSavedMsg:
    plan: Optional[Plan] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class PlanCreatedMsg:
    plan_id: str = ''
    title: str = ''
    error: Optional[Exception] = None


@dataclass(frozen=True)
class PlanDeletedMsg:
    plan_id: str
    error: Optional[Exception] = None


@dataclass(frozen=True)
class ChunkStatusUpdatedMsg:
    plan_id: str
    chunk_id: str
    status: Status
    error: Optional[Exception] = None


# ============================================================================
# FORM WIDGETS
# ============================================================================

class InputField:
    """Single line text input."""

    def __init__(self, label: str, placeholder: str = '', value: str = ''):
        self.label = label
        self.placeholder = placeholder
        self.value = value
        self.focused = False

    def update(self, key: str) -> bool:
        """Apply a key press; True if the value changed."""
        if not self.focused:
            return False
        if key == 'backspace':
            self.value = self.value[:-1]
            return True
        if len(key) == 1 and key.isprintable():
            self.value += key
            return True
        return False

    def view(self) -> Text:
        text = Text()
        text.append(f"{self.label}\n", style="bold")
        text.append("> " if self.focused else "  ", style=Theme.HIGHLIGHT)
        if self.value:
            text.append(self.value)
        else:
            text.append(self.placeholder, style=Theme.DIM)
        if self.focused:
            text.append(" ▎", style=Theme.HIGHLIGHT)
        return text


class PlanForm:
    def __init__(self, mode: str, inputs: List[InputField], target_plan_id: Optional[str] = None):
        self.mode = mode
        self.inputs = inputs
        self.focus_index = 0
        self.target_plan_id = target_plan_id
        self.error: Optional[str] = None
        self._update_focus()

    def move_focus(self, direction: int):
        self.focus_index = (self.focus_index + direction) % len(self.inputs)
        self._update_focus()

    def _update_focus(self):
        for i, field in enumerate(self.inputs):
            field.focused = i == self.focus_index

    def values(self) -> List[str]:
        return [field.value.strip() for field in self.inputs]


@dataclass
class ConfirmDialog:
    action: str
    message: str
    opener: str
    plan_id: str


# ============================================================================
# MODULE
# ============================================================================

class PlanModule(Module):
    """Create, inspect, edit and delete learning plans."""

    id = 'plans'
    title = 'Plans'

    def __init__(self, service: Optional[PlanService]):
        self.service = service
        self.state = STATE_LIST

        self.plans: List[PlanRecord] = []
        self.list_cursor = 0

        self.detail_plan: Optional[Plan] = None
        self.chunk_cursor = 0

        self.form: Optional[PlanForm] = None
        self.confirm: Optional[ConfirmDialog] = None
        self.loading = False
        self.load_error: Optional[str] = None
        self.data_loaded = False
        self._awaiting_plan_id: Optional[str] = None

    def shortcuts(self) -> List[Shortcut]:
        if self.state == STATE_LIST:
            return [Shortcut("Enter", "view plan"), Shortcut("n", "new plan"), Shortcut("d", "delete plan")]
        if self.state == STATE_DETAIL:
            return [
                Shortcut("space", "toggle chunk status"),
                Shortcut("e", "edit metadata"),
                Shortcut("d", "delete plan"),
                Shortcut("Esc", "back"),
            ]
        if self.state in (STATE_EDIT, STATE_CREATE):
            return [Shortcut("Tab", "next field"), Shortcut("Enter", "submit"), Shortcut("Esc", "cancel")]
        if self.state == STATE_CONFIRM:
            return [Shortcut("Enter", "confirm"), Shortcut("Esc", "cancel")]
        return []

    def captures_input(self) -> bool:
        return self.state in (STATE_EDIT, STATE_CREATE)

    # ========================================================================
    # UPDATE
    # ========================================================================

    def update(self, msg):
        if isinstance(msg, KeyMsg):
            return self._handle_key(msg.key)
        if isinstance(msg, PlansLoadedMsg):
            return self._on_plans_loaded(msg)
        if isinstance(msg, PlanLoadedMsg):
            return self._on_plan_loaded(msg)
        if isinstance(msg, PlanSavedMsg):
            return self._on_plan_saved(msg)
        if isinstance(msg, PlanCreatedMsg):
            return self._on_plan_created(msg)
        if isinstance(msg, PlanDeletedMsg):
            return self._on_plan_deleted(msg)
        if isinstance(msg, ChunkStatusUpdatedMsg):
            return self._on_chunk_status_updated(msg)
        if isinstance(msg, ModuleActivatedMsg):
            if msg.id == self.id and self.state not in (STATE_EDIT, STATE_CREATE, STATE_CONFIRM):
                return self, self._load_plans()
        return self, None

    def _on_plans_loaded(self, msg: PlansLoadedMsg):
        self.loading = False
        if msg.error is not None:
            self.load_error = str(msg.error)
            return self, status_cmd(f"Failed to load plans: {msg.error}", True)

        self.plans = list(msg.records or [])
        self.load_error = None
        self.data_loaded = True
        if self.list_cursor >= len(self.plans):
            self.list_cursor = max(0, len(self.plans) - 1)
        return self, status_cmd("Plans refreshed")

    def _on_plan_loaded(self, msg: PlanLoadedMsg):
        if msg.plan_id != self._awaiting_plan_id:
            logger.debug("Dropping stale plan load", plan_id=msg.plan_id, awaiting=self._awaiting_plan_id)
            if self._awaiting_plan_id is None:
                self.loading = False
            return self, None

        self._awaiting_plan_id = None
        self.loading = False
        if msg.error is not None:
            return self, status_cmd(f"Failed to load plan: {msg.error}", True)

        same_plan = self.detail_plan is not None and self.detail_plan.id == msg.plan.id
        self.detail_plan = msg.plan
        if same_plan:
            self.chunk_cursor = min(self.chunk_cursor, max(0, len(msg.plan.chunks) - 1))
        else:
            self.chunk_cursor = 0
        if self.state in (STATE_LIST, STATE_DETAIL):
            self.state = STATE_DETAIL
        return self, None

    def _on_plan_saved(self, msg: PlanSavedMsg):
        self.loading = False
        if msg.error is not None:
            if self.form is not None:
                self.form.error = f"Failed to save plan: {msg.error}"
            return self, status_cmd(f"Failed to save plan: {msg.error}", True)

        self.detail_plan = msg.plan
        self.state = STATE_DETAIL
        self.form = None
        return self, batch(
            status_cmd("Plan updated"),
            broadcast_cmd(TOPIC_PLANS_CHANGED, msg.plan.id),
            self._load_plans(),
        )

    def _on_plan_created(self, msg: PlanCreatedMsg):
        self.loading = False
        if msg.error is not None:
            if self.form is not None:
                self.form.error = f"Failed to create plan: {msg.error}"
            return self, status_cmd(f"Failed to create plan: {msg.error}", True)

        self.form = None
        self.state = STATE_LIST
        return self, batch(
            status_cmd(f"Plan created: {msg.title}"),
            broadcast_cmd(TOPIC_PLANS_CHANGED, msg.plan_id),
            self._load_plans(),
        )

    def _on_plan_deleted(self, msg: PlanDeletedMsg):
        self.loading = False
        if msg.error is not None:
            return self, status_cmd(f"Failed to delete plan: {msg.error}", True)

        self.state = STATE_LIST
        self.detail_plan = None
        self.confirm = None
        return self, batch(
            status_cmd("Plan deleted"),
            broadcast_cmd(TOPIC_PLANS_CHANGED, msg.plan_id),
            self._load_plans(),
        )

    def _on_chunk_status_updated(self, msg: ChunkStatusUpdatedMsg):
        self.loading = False
        if msg.error is not None:
            return self, status_cmd(f"Failed to update chunk: {msg.error}", True)

        reload = None
        if self.detail_plan is not None and self.detail_plan.id == msg.plan_id:
            reload = self._load_plan(msg.plan_id)
        return self, batch(
            status_cmd("Chunk status updated"),
            broadcast_cmd(TOPIC_PLANS_CHANGED, msg.plan_id),
            reload,
        )

    # ========================================================================
    # KEYS
    # ========================================================================

    def _handle_key(self, key: str):
        if self.state == STATE_LIST:
            return self._list_keys(key)
        if self.state == STATE_DETAIL:
            return self._detail_keys(key)
        if self.state in (STATE_EDIT, STATE_CREATE):
            return self._form_keys(key)
        if self.state == STATE_CONFIRM:
            return self._confirm_keys(key)
        return self, None

    def _list_keys(self, key: str):
        if key in ('up', 'k'):
            self._move_list_cursor(-1)
        elif key in ('down', 'j'):
            self._move_list_cursor(1)
        elif key == 'enter':
            return self, self._open_selected_plan()
        elif key in ('n', 'N'):
            self._show_create_form()
        elif key in ('d', 'D'):
            self._confirm_delete_selected()
        return self, None

    def _detail_keys(self, key: str):
        if self.detail_plan is None:
            return self, None

        if key == 'esc':
            self.state = STATE_LIST
            self.detail_plan = None
            self._awaiting_plan_id = None
            self.loading = False
        elif key in ('up', 'k'):
            self._move_chunk_cursor(-1)
        elif key in ('down', 'j'):
            self._move_chunk_cursor(1)
        elif key in ('e', 'E'):
            self._show_edit_form()
        elif key in ('d', 'D'):
            self.confirm = ConfirmDialog('delete', "Delete this plan?", STATE_DETAIL, self.detail_plan.id)
            self.state = STATE_CONFIRM
        elif key == ' ':
            return self, self._toggle_selected_chunk()
        return self, None

    def _form_keys(self, key: str):
        if self.form is None:
            self.state = STATE_LIST
            return self, None

        if key == 'esc':
            self.form = None
            self.state = STATE_LIST
        elif key == 'tab':
            self.form.move_focus(1)
        elif key == 'shift+tab':
            self.form.move_focus(-1)
        elif key == 'enter':
            return self, self._submit_form()
        elif self.form.inputs[self.form.focus_index].update(key):
            self.form.error = None
        return self, None

    def _confirm_keys(self, key: str):
        if self.confirm is None:
            self.state = STATE_LIST
            return self, None

        if key == 'esc':
            self.state = self.confirm.opener
            self.confirm = None
        elif key == 'enter':
            dialog = self.confirm
            self.state = dialog.opener
            self.confirm = None
            return self, self._delete_plan(dialog.plan_id)
        return self, None

    def _move_list_cursor(self, direction: int):
        if self.plans:
            self.list_cursor = (self.list_cursor + direction) % len(self.plans)

    def _move_chunk_cursor(self, direction: int):
        if self.detail_plan is not None and self.detail_plan.chunks:
            self.chunk_cursor = (self.chunk_cursor + direction) % len(self.detail_plan.chunks)

    # ========================================================================
    # ACTIONS
    # ========================================================================

    def _load_plans(self):
        if self.service is None:
            self.load_error = "plan service unavailable"
            return status_cmd("Plan service unavailable", True)

        self.loading = True
        self.load_error = None
        service = self.service

        def load():
            try:
                return PlansLoadedMsg(records=service.list(None))
            except Exception as e:
                logger.error("Listing plans failed", error=str(e))
                return PlansLoadedMsg(error=e)
        return load

    def _load_plan(self, plan_id: str):
        self._awaiting_plan_id = plan_id
        self.loading = True
        service = self.service

        def load():
            try:
                return PlanLoadedMsg(plan_id=plan_id, plan=service.get(plan_id))
            except Exception as e:
                logger.error("Loading plan failed", plan_id=plan_id, error=str(e))
                return PlanLoadedMsg(plan_id=plan_id, error=e)
        return load

    def _selected_record(self) -> Optional[PlanRecord]:
        if not self.plans or self.list_cursor >= len(self.plans):
            return None
        return self.plans[self.list_cursor]

    def _open_selected_plan(self):
        record = self._selected_record()
        if record is None:
            return None
        return self._load_plan(record.id)

    def _confirm_delete_selected(self):
        record = self._selected_record()
        if record is None:
            return
        self.confirm = ConfirmDialog('delete', f'Delete plan "{record.title}"?', STATE_LIST, record.id)
        self.state = STATE_CONFIRM

    def _show_create_form(self):
        self.form = PlanForm('create', [
            InputField("Topic", "e.g. Rust async"),
            InputField("Total Hours", "e.g. 40"),
            InputField("Level", "beginner/intermediate/advanced"),
        ])
        self.state = STATE_CREATE

    def _show_edit_form(self):
        plan = self.detail_plan
        self.form = PlanForm('edit', [
            InputField("Title", value=plan.title),
            InputField("Total Hours", value=f"{plan.total_hours:.1f}"),
            InputField("Tags", "comma separated", value=", ".join(plan.tags)),
        ], target_plan_id=plan.id)
        self.state = STATE_EDIT

    def _submit_form(self):
        if self.form.mode == 'create':
            return self._create_from_form()
        return self._update_from_form()

    def _create_from_form(self):
        topic, hours, level = self.form.values()
        try:
            request = validate_request(
                {'topic': topic, 'total_hours': hours, 'level': level}, CreatePlanRequest
            )
        except ValidationError as e:
            self.form.error = e.message
            return None

        self.loading = True
        service = self.service

        def create():
            try:
                plan = service.create(request)
                return PlanCreatedMsg(plan_id=plan.id, title=plan.title)
            except Exception as e:
                logger.error("Creating plan failed", topic=request.topic, error=str(e))
                return PlanCreatedMsg(error=e)
        return create

    def _update_from_form(self):
        if self.detail_plan is None:
            return status_cmd("Plan not loaded", True)

        title, hours, tags = self.form.values()
        try:
            request = validate_request(
                {'title': title, 'total_hours': hours, 'tags': tags}, UpdatePlanRequest
            )
        except ValidationError as e:
            self.form.error = e.message
            return None

        plan = self.detail_plan.copy()
        plan.title = request.title
        plan.total_hours = request.total_hours
        plan.tags = request.tags

        self.loading = True
        service = self.service

        def save():
            try:
                service.update(plan)
                return PlanSavedMsg(plan=plan)
            except Exception as e:
                logger.error("Saving plan failed", plan_id=plan.id, error=str(e))
                return PlanSavedMsg(error=e)
        return save

    def _delete_plan(self, plan_id: str):
        self.loading = True
        service = self.service

        def delete():
            try:
                service.delete(plan_id)
                return PlanDeletedMsg(plan_id=plan_id)
            except Exception as e:
                logger.error("Deleting plan failed", plan_id=plan_id, error=str(e))
                return PlanDeletedMsg(plan_id=plan_id, error=e)
        return delete

    def _toggle_selected_chunk(self):
        plan = self.detail_plan
        if plan is None or not plan.chunks:
            return None

        chunk = plan.chunks[self.chunk_cursor]
        next_status = next_chunk_status(chunk.status)
        self.loading = True
        service = self.service
        plan_id, chunk_id = plan.id, chunk.id

        def toggle():
            try:
                service.update_chunk_status(plan_id, chunk_id, next_status)
                return ChunkStatusUpdatedMsg(plan_id, chunk_id, next_status)
            except Exception as e:
                logger.error("Chunk status update failed", plan_id=plan_id, chunk_id=chunk_id, error=str(e))
                return ChunkStatusUpdatedMsg(plan_id, chunk_id, next_status, error=e)
        return toggle

    # ========================================================================
    # VIEW
    # ========================================================================

    def view(self) -> Text:
        if self.loading:
            return Text("Loading plans…", style=Theme.DIM)

        if self.state == STATE_LIST:
            return self._render_list()
        if self.state == STATE_DETAIL:
            return self._render_detail()
        if self.state in (STATE_EDIT, STATE_CREATE):
            return self._render_form()
        if self.state == STATE_CONFIRM:
            return self._render_confirm()
        return Text("Unknown state.")

    def _render_list(self) -> Text:
        if self.load_error:
            return Text(f"Failed to load plans: {self.load_error}", style=Theme.ERROR)

        text = Text("Plans", style=Theme.HEADER)
        text.append("\n\n")
        if not self.plans:
            text.append("No plans found.\n", style=Theme.DIM)
            text.append("Press 'n' to create a new plan.", style=Theme.DIM)
            return text

        table = Table(["ID", "Title", "Status", "Hours"])
        for i, record in enumerate(self.plans):
            row = [record.id, record.title, str(record.status), f"{record.total_hours:.1f}"]
            if i == self.list_cursor:
                table.add_highlighted_row(row)
            else:
                table.add_row(row)
        text.append_text(table.render())
        return text

    def _render_detail(self) -> Text:
        plan = self.detail_plan
        if plan is None:
            return Text("Plan not loaded.")

        text = Text(plan.title, style=Theme.TITLE)
        text.append("\n")
        text.append(f"Status: {plan.status} | Total Hours: {plan.total_hours:.1f} | Progress: {plan.progress_percent()}%\n")
        if plan.tags:
            text.append(f"Tags: {', '.join(plan.tags)}\n")
        text.append("\nChunks:\n", style="bold")

        table = Table(["ID", "Title", "Status", "Duration"])
        for i, chunk in enumerate(plan.chunks):
            row = [chunk.id, chunk.title, str(chunk.status), f"{chunk.duration} min"]
            if i == self.chunk_cursor:
                table.add_highlighted_row(row)
            else:
                table.add_row(row)
        text.append_text(table.render())
        text.append("\n[Esc] Back  [space] Toggle status  [e] Edit  [d] Delete", style=Theme.DIM)
        return text

    def _render_form(self) -> Text:
        if self.form is None:
            return Text()

        header = "New Plan" if self.form.mode == 'create' else "Edit Plan"
        text = Text(header, style=Theme.HEADER)
        text.append("\n\n")
        for field in self.form.inputs:
            text.append_text(field.view())
            text.append("\n\n")

        if self.form.error:
            text.append(self.form.error, style=Theme.ERROR)
            text.append("\n")
        text.append("[Enter] Submit  [Esc] Cancel", style=Theme.DIM)
        return text

    def _render_confirm(self) -> Text:
        if self.confirm is None:
            return Text()
        text = Text(self.confirm.message, style=f"bold {Theme.ERROR}")
        text.append("\n\n[Enter] Confirm  [Esc] Cancel", style=Theme.DIM)
        return text
