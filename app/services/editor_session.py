from loguru import logger
from typing import Callable, Dict, List, Optional, Set

from app.models.metadata import (
    ALT_TEXT_MAX_LENGTH,
    META_DESCRIPTION_MAX_LENGTH,
    META_TITLE_MAX_LENGTH,
    GeneratedAltText,
    GeneratedMetadata,
    ImageUnit,
    Page,
    Unit,
    clamp,
)

FIELD_LIMITS = {
    "alt_text": ALT_TEXT_MAX_LENGTH,
    "meta_title": META_TITLE_MAX_LENGTH,
    "meta_description": META_DESCRIPTION_MAX_LENGTH,
}

Listener = Callable[["EditorSession"], None]


class EditorSession:
    """
    Per-page editing state for one merchant session.

    Holds the current page, the selection, edited values that override the
    fetched text, AI suggestions and the actions currently in flight. All of
    it except the cursor history is dropped whenever a different page is
    shown, so no selection can point at a unit that is no longer visible.
    Listeners are called after every change.
    """

    def __init__(self):
        self.page: Optional[Page] = None
        self.selected: Set[str] = set()
        self.overrides: Dict[str, Dict[str, str]] = {}
        self.generated: Dict[str, object] = {}
        self.in_flight: Dict[str, Set[str]] = {}
        # cursors[i] is the cursor that loads page i + 1
        self._cursors: List[Optional[str]] = [None]
        self._listeners: List[Listener] = []

    # ---------------------------------------------------------
    # Subscription
    # ---------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    # ---------------------------------------------------------
    # Pages
    # ---------------------------------------------------------
    @property
    def units(self) -> List[Unit]:
        return list(self.page.units) if self.page else []

    @property
    def current_page(self) -> int:
        return self.page.page_number if self.page else 1

    def show_page(self, page: Page):
        if self.page is None or page.page_number != self.page.page_number:
            self._clear_page_state()
        else:
            keys = {unit.key for unit in page.units}
            self.selected &= keys
            self.overrides = {k: v for k, v in self.overrides.items() if k in keys}
            self.generated = {k: v for k, v in self.generated.items() if k in keys}
        self.page = page

        # Remember how to reach the following page so "previous" can come back here.
        del self._cursors[page.page_number:]
        if page.has_next and page.cursor and len(self._cursors) == page.page_number:
            self._cursors.append(page.cursor)
        self._notify()

    def cursor_for_page(self, page_number: int) -> Optional[str]:
        """Cursor to request ``page_number``; pages never seen fall back to page one."""
        if 1 <= page_number <= len(self._cursors):
            return self._cursors[page_number - 1]
        return None

    def next_page_request(self) -> Optional[dict]:
        if not self.page or not self.page.has_next:
            return None
        number = self.current_page + 1
        return {"page": number, "cursor": self.cursor_for_page(number)}

    def previous_page_request(self) -> Optional[dict]:
        if self.current_page <= 1:
            return None
        number = self.current_page - 1
        return {"page": number, "cursor": self.cursor_for_page(number)}

    def reset(self):
        self._clear_page_state()
        self._notify()

    def _clear_page_state(self):
        self.selected = set()
        self.overrides = {}
        self.generated = {}
        self.in_flight = {}

    # ---------------------------------------------------------
    # Selection
    # ---------------------------------------------------------
    def _unit(self, unit_key: str) -> Unit:
        for unit in self.units:
            if unit.key == unit_key:
                return unit
        raise KeyError(f"Unit {unit_key} is not on the current page")

    def select(self, unit_key: str):
        self._unit(unit_key)
        self.selected.add(unit_key)
        self._notify()

    def deselect(self, unit_key: str):
        self.selected.discard(unit_key)
        self._notify()

    def select_all(self, selected: bool = True):
        self.selected = {unit.key for unit in self.units} if selected else set()
        self._notify()

    @property
    def all_selected(self) -> bool:
        return bool(self.units) and len(self.selected) == len(self.units)

    # ---------------------------------------------------------
    # Edits and suggestions
    # ---------------------------------------------------------
    def set_override(self, unit_key: str, value: str, field: Optional[str] = None):
        unit = self._unit(unit_key)
        if isinstance(unit, ImageUnit):
            field = "alt_text"
        elif field not in ("meta_title", "meta_description"):
            raise ValueError(f"Unknown metadata field: {field}")
        self.overrides.setdefault(unit_key, {})[field] = clamp(value, FIELD_LIMITS[field])
        self._notify()

    def record_generated(self, unit_key: str, generated):
        self.generated[unit_key] = generated
        self._notify()

    def use_generated(self, unit_key: str):
        generated = self.generated.get(unit_key)
        if generated is None:
            raise KeyError(f"No suggestion for {unit_key}")
        if isinstance(generated, GeneratedAltText):
            self.overrides[unit_key] = {"alt_text": clamp(generated.alt_text, ALT_TEXT_MAX_LENGTH)}
        elif isinstance(generated, GeneratedMetadata):
            self.overrides[unit_key] = {
                "meta_title": clamp(generated.meta_title, META_TITLE_MAX_LENGTH),
                "meta_description": clamp(generated.meta_description, META_DESCRIPTION_MAX_LENGTH),
            }
        self._notify()

    def edited_unit(self, unit_key: str) -> Unit:
        unit = self._unit(unit_key)
        return unit.with_overrides(**self.overrides.get(unit_key, {}))

    def bulk_update_units(self) -> List[Unit]:
        """Selected units, in page order, with edits applied."""
        return [self.edited_unit(unit.key) for unit in self.units if unit.key in self.selected]

    def bulk_generate_units(self) -> List[Unit]:
        return self.units

    # ---------------------------------------------------------
    # In-flight tracking
    # ---------------------------------------------------------
    def begin(self, action: str, unit_keys: List[str]):
        self.in_flight[action] = set(unit_keys)
        logger.debug(f"{action} started for {len(unit_keys)} units")
        self._notify()

    def finish(self, action: str):
        self.in_flight.pop(action, None)
        self._notify()

    def is_busy(self, unit_key: Optional[str] = None, action: Optional[str] = None) -> bool:
        actions = [action] if action else list(self.in_flight)
        for name in actions:
            keys = self.in_flight.get(name)
            if keys is None:
                continue
            if unit_key is None or unit_key in keys:
                return True
        return False
