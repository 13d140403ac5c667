"""Flyout Endpoints - Transport-Agnostic Request Handling.

The client script talks to five endpoints: ``load``, ``save``, ``delete``,
``search`` and ``action``. :class:`FlyoutEndpoints` implements what each one
does once a request has been routed and authenticated by the host's web
layer: resolve the manager and flyout, check the flyout's capability, invoke
the host callbacks, and shape the response.

Every handler returns a plain response mapping with ``"success": True`` or
raises :class:`~flyouts.base.errors.EndpointError` carrying a stable code and
an HTTP-style status. :meth:`FlyoutEndpoints.handle` wraps the handlers for
hosts that want a single ``(status, body)`` entry point.

Error Codes:
    ===============================  ======  ==================================
    Code                             Status  Raised when
    ===============================  ======  ==================================
    ``rest_forbidden``               403     Capability check fails
    ``flyout_manager_not_found``     404     No manager for the prefix
    ``flyout_not_found``             404     No flyout under the id
    ``flyout_load_failed``           404     ``load`` returned ``False``
    ``flyout_save_not_configured``   500     No ``save`` callback
    ``flyout_validation_failed``     422     ``validate`` returned ``False``
    ``flyout_save_failed``           500     ``save`` returned ``False``
    ``flyout_delete_not_configured`` 500     No ``delete`` callback
    ``flyout_delete_failed``         500     ``delete`` returned ``False``
    ``flyout_field_not_found``       404     Search names an unknown field
    ``flyout_search_no_callback``    500     Field has no search callback
    ``flyout_action_not_found``      404     No callback for the action key
    ``flyout_callback_failed``       500     A host callback raised
    ===============================  ======  ==================================

Host callbacks may raise :class:`EndpointError` themselves to return a
custom error; any other exception becomes ``flyout_callback_failed``.

Examples:
    >>> endpoints = FlyoutEndpoints(registry)
    >>> endpoints.search(manager="shop", flyout="edit_order", field_key="customer", term="ali")
    {'success': True, 'results': [{'id': '5', 'text': 'Alice'}]}
    >>> endpoints.handle("load", {"manager": "shop", "flyout": "missing"})
    (404, {'success': False, 'code': 'flyout_not_found', ...})
"""

import inspect
from collections.abc import Callable, Mapping
from typing import Any

from flyouts.base.errors import CallbackFailure, EndpointError, FlyoutError
from flyouts.fields.sanitizer import sanitize_text_field
from flyouts.registry.base import FlyoutConfig
from flyouts.registry.manager import FlyoutManager
from flyouts.registry.registry import FlyoutRegistry, get_registry
from flyouts.utils.config import get_config_value
from flyouts.utils.logger import get_logger

logger = get_logger("endpoints")

ROUTES = ("load", "save", "delete", "search", "action")


def _call(name: str, callback: Callable[..., Any], *args: Any) -> Any:
    """Invoke a host callback; package errors such as EndpointError pass through."""
    try:
        return callback(*args)
    except FlyoutError:
        raise
    except Exception as e:
        raise CallbackFailure(name, str(e)) from e


class FlyoutEndpoints:
    """Request handlers for the flyout client script.

    :param registry: Registry to resolve managers from; the process-wide
        default registry when omitted
    :type registry: FlyoutRegistry, optional
    """

    def __init__(self, registry: FlyoutRegistry | None = None):
        self._registry = registry

    @property
    def registry(self) -> FlyoutRegistry:
        return self._registry if self._registry is not None else get_registry()

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    def check_permission(self, manager: str, flyout: str) -> bool:
        """Check the current user against the flyout's capability.

        Unknown managers or flyouts fall back to the default capability, so
        the not-found errors are only reported to users who could act on them.

        :raises EndpointError: ``rest_forbidden`` when the check fails
        """
        capability = get_config_value("flyouts.default_capability", "manage_options")
        owner = self.registry.lookup(manager)
        if owner is not None:
            config = owner.get(flyout)
            if config is not None and config.capability:
                capability = config.capability

        if not self.registry.is_allowed(capability):
            raise EndpointError(
                "rest_forbidden", "You do not have permission to perform this action.", status=403
            )
        return True

    def _resolve(self, manager: str, flyout: str) -> tuple[FlyoutManager, FlyoutConfig]:
        self.check_permission(manager, flyout)

        owner = self.registry.lookup(manager)
        if owner is None:
            raise EndpointError("flyout_manager_not_found", f'Flyout manager "{manager}" not found.', status=404)

        config = owner.get(flyout)
        if config is None:
            raise EndpointError("flyout_not_found", f'Flyout "{flyout}" not found.', status=404)

        return owner, config

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def load(self, manager: str, flyout: str, item_id: Any = 0) -> dict[str, Any]:
        """Load a record and return the prepared form payload."""
        owner, config = self._resolve(manager, flyout)

        data = None
        if config.load is not None:
            data = _call("load", config.load, item_id)

        if data is False:
            raise EndpointError("flyout_load_failed", "Record not found.", status=404)

        return {"success": True, "form": owner.build_form(flyout, data, item_id)}

    def save(
        self, manager: str, flyout: str, form_data: Mapping[str, Any], item_id: Any = 0
    ) -> dict[str, Any]:
        """Sanitize, validate, and hand submitted form data to ``save``."""
        owner, config = self._resolve(manager, flyout)

        if config.save is None:
            raise EndpointError("flyout_save_not_configured", "Save not configured for this flyout.", status=500)

        sanitized = owner.sanitizer.sanitize_form_data(form_data or {}, config.fields)

        if config.validate_ is not None:
            if _call("validate", config.validate_, sanitized) is False:
                raise EndpointError("flyout_validation_failed", "Validation failed.", status=422)

        # A submitted id wins over the request's item_id
        record_id = sanitized["id"] if sanitized.get("id") is not None else item_id

        result = _call("save", config.save, record_id, sanitized)
        if result is False:
            raise EndpointError("flyout_save_failed", "Save failed.", status=500)

        logger.debug(f"Saved {manager}_{flyout} record {record_id!r}")
        return {"success": True, "message": "Saved successfully."}

    def delete(self, manager: str, flyout: str, item_id: Any = 0) -> dict[str, Any]:
        _, config = self._resolve(manager, flyout)

        if config.delete is None:
            raise EndpointError(
                "flyout_delete_not_configured", "Delete not configured for this flyout.", status=500
            )

        if _call("delete", config.delete, item_id) is False:
            raise EndpointError("flyout_delete_failed", "Delete failed.", status=500)

        logger.debug(f"Deleted {manager}_{flyout} record {item_id!r}")
        return {"success": True, "message": "Deleted successfully."}

    def search(
        self, manager: str, flyout: str, field_key: str, term: str = "", include: Any = ""
    ) -> dict[str, Any]:
        """Search or hydrate an ajax field, returning Select2-shaped results.

        A non-empty ``include`` (``"5,7,99"`` or a list) switches to hydration
        mode and ``term`` is ignored.
        """
        owner, config = self._resolve(manager, flyout)

        if config.find_field(field_key) is None:
            raise EndpointError("flyout_field_not_found", f'Field "{field_key}" not found.', status=404)

        adapter = owner.search_adapter(flyout, field_key)
        if adapter is None:
            raise EndpointError(
                "flyout_search_no_callback",
                f'No search callback defined for field "{field_key}".',
                status=500,
            )

        choices = adapter.query(sanitize_text_field(term), include)
        return {"success": True, "results": [choice.to_select2() for choice in choices]}

    def action(
        self,
        manager: str,
        flyout: str,
        action_key: str,
        item_id: Any = 0,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Run an action button, action menu, or notes callback.

        The callback receives the request params plus ``id`` and
        ``action_key``. A mapping it returns is merged into the response.
        """
        owner, _ = self._resolve(manager, flyout)

        callback = owner.find_action_callback(flyout, action_key)
        if callback is None:
            raise EndpointError("flyout_action_not_found", f'Action "{action_key}" not found.', status=404)

        payload = dict(params or {})
        payload["id"] = item_id
        payload["action_key"] = action_key

        result = _call(action_key, callback, payload)
        if isinstance(result, Mapping):
            return {"success": True, **result}
        return {"success": True, "message": "Action completed successfully."}

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def handle(self, route: str, params: Mapping[str, Any]) -> tuple[int, dict[str, Any]]:
        """Dispatch one request and convert failures into an error body.

        :param route: One of ``load``, ``save``, ``delete``, ``search``, ``action``
        :param params: Request parameters; unknown keys are ignored
        :return: ``(status, body)``
        """
        if route not in ROUTES:
            error = EndpointError("rest_no_route", f'No route matches "{route}".', status=404)
            return error.status, error.to_dict()

        handler = getattr(self, route)
        accepted = inspect.signature(handler).parameters
        kwargs = {key: value for key, value in params.items() if key in accepted}
        missing = [
            name for name, parameter in accepted.items()
            if parameter.default is inspect.Parameter.empty and name not in kwargs
        ]

        try:
            if missing:
                raise EndpointError(
                    "rest_missing_callback_param",
                    f"Missing parameter(s): {', '.join(missing)}",
                    status=400,
                )
            return 200, handler(**kwargs)
        except EndpointError as e:
            logger.warning(f"{route} failed for {params.get('manager')}_{params.get('flyout')}: {e.code}")
            return e.status, e.to_dict()
        except FlyoutError as e:
            logger.error(f"{route} failed for {params.get('manager')}_{params.get('flyout')}: {e}")
            error = EndpointError("flyout_callback_failed", str(e), status=500)
            return error.status, error.to_dict()
