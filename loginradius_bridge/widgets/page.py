"""What the orchestrator needs from the page and the widget library."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping

from .forms import FormType


class Page(ABC):
    """The page the widgets live on."""

    @property
    @abstractmethod
    def url(self) -> str:
        """The current page URL."""

    @abstractmethod
    def redirect(self, url: str) -> None:
        ...

    @abstractmethod
    def show_error(self, form_type: FormType, message: str) -> None:
        """Show a message in the form's error area and scroll it into view."""

    @abstractmethod
    def show_field_errors(self, form_type: FormType,
                          fields: Mapping[str, str]) -> None:
        ...

    @abstractmethod
    def show_notice(self, form_type: FormType, message: str) -> None:
        ...

    @abstractmethod
    def bind_submit(self, form_type: FormType,
                    handler: Callable[[Dict[str, Any]], None]) -> None:
        """Call ``handler`` with the field values on submit."""

    def stop_spinner(self, container: str) -> None:
        """Stop the loading indicator on a form container."""


class WidgetAPI(ABC):
    """
    The direct API calls of a widget context.

    Calls return the provider's response, or raise :class:`.ProviderError`
    with the first error LoginRadius reported.
    """

    @abstractmethod
    def update_data(self, schema: List[Dict[str, str]], data: Dict[str, Any],
                    access_token: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def change_password(self, data: Dict[str, Any],
                        access_token: str) -> Dict[str, Any]:
        ...


class WidgetContext(ABC):
    """One instance of the LoginRadius widget library."""

    @abstractmethod
    def init(self, form_type: str, options: Dict[str, Any]) -> None:
        """Render a widget form."""

    @abstractmethod
    def custom_interface(self, selector: str, options: Dict[str, Any]) -> None:
        ...

    @property
    @abstractmethod
    def api(self) -> WidgetAPI:
        ...


class WidgetLibrary(ABC):
    """Creates widget contexts once the library has loaded."""

    @abstractmethod
    def create(self, options: Dict[str, Any]) -> WidgetContext:
        ...

    @abstractmethod
    def is_loaded(self) -> bool:
        ...
