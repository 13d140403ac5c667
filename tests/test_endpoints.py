"""Tests for the transport-agnostic endpoint handlers.

Validates:
- Manager/flyout resolution and permission errors
- load, save, delete callbacks and their failure codes
- search and hydration through ajax fields
- action callbacks and the handle() dispatcher
"""

import pytest

from flyouts.base.errors import EndpointError
from flyouts.endpoints import FlyoutEndpoints
from flyouts.registry import FlyoutRegistry, get_registry


@pytest.fixture
def saved():
    return []


@pytest.fixture
def endpoints(registry, people, saved):
    records = {5: {"name": "Alice", "email": "alice@example.com", "customer": 7}}

    def load(item_id):
        return records.get(int(item_id), False)

    def save(item_id, data):
        saved.append((item_id, data))
        return data.get("name") != "fail"

    def delete(item_id):
        return int(item_id) in records

    def validate(data):
        return bool(data.get("name"))

    def refund(params):
        return {"refunded": params["id"], "amount": params.get("amount")}

    registry.get_manager("shop").register_flyout(
        "edit_customer",
        {
            "title": "Edit Customer",
            "fields": {
                "name": {"type": "text"},
                "email": {"type": "email"},
                "customer": {"type": "ajax_select", "callback": people},
                "tags": {"type": "ajax_select", "callback": people, "tags": True, "name": "labels"},
                "page": {"type": "post", "post_type": "page"},
                "plain": {"type": "select", "options": {"a": "A"}},
                "actions": {
                    "type": "action_buttons",
                    "buttons": [{"text": "Refund", "action": "refund", "callback": refund}],
                },
            },
            "load": load,
            "save": save,
            "delete": delete,
            "validate": validate,
        },
    )
    registry.get_manager("shop").register_flyout("view_only", {"fields": {"name": {}}})
    return FlyoutEndpoints(registry)


class TestResolution:
    """Test manager/flyout lookup and permissions."""

    def test_unknown_manager(self, endpoints):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.load(manager="crm", flyout="edit")
        assert exc_info.value.code == "flyout_manager_not_found"
        assert exc_info.value.status == 404

    def test_unknown_flyout(self, endpoints):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.load(manager="shop", flyout="missing")
        assert exc_info.value.code == "flyout_not_found"

    def test_lookup_does_not_create_managers(self, endpoints, registry):
        with pytest.raises(EndpointError):
            endpoints.delete(manager="crm", flyout="edit")
        assert not registry.has_manager("crm")

    def test_forbidden(self, registry, endpoints):
        registry.permission_checker = lambda capability: False
        with pytest.raises(EndpointError) as exc_info:
            endpoints.load(manager="shop", flyout="edit_customer", item_id=5)
        assert exc_info.value.code == "rest_forbidden"
        assert exc_info.value.status == 403

    def test_flyout_capability_is_checked(self, registry, endpoints):
        seen = []
        registry.permission_checker = lambda capability: seen.append(capability) or True
        registry.get_manager("shop").register_flyout("orders", {"fields": {}, "capability": "edit_orders"})

        endpoints.check_permission("shop", "orders")
        endpoints.check_permission("crm", "anything")
        assert seen == ["edit_orders", "manage_options"]

    def test_default_registry(self):
        get_registry().get_manager("shop").register_flyout("edit", {"fields": {"name": {}}})
        assert FlyoutEndpoints().load(manager="shop", flyout="edit")["success"] is True


class TestLoad:
    """Test the load handler."""

    def test_form_payload(self, endpoints):
        response = endpoints.load(manager="shop", flyout="edit_customer", item_id=5)
        form = response["form"]

        assert response["success"] is True
        assert form["title"] == "Edit Customer"
        values = {field["name"]: field["value"] for field in form["fields"]}
        assert values["name"] == "Alice"
        assert values["customer"] == 7

        customer = next(field for field in form["fields"] if field["name"] == "customer")
        assert customer["options"] == {"7": "Bob"}

    def test_record_not_found(self, endpoints):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.load(manager="shop", flyout="edit_customer", item_id=99)
        assert exc_info.value.code == "flyout_load_failed"
        assert exc_info.value.status == 404

    def test_without_load_callback(self, endpoints):
        response = endpoints.load(manager="shop", flyout="view_only")
        assert response["form"]["fields"][0]["value"] is None


class TestSave:
    """Test the save handler."""

    def test_sanitized_data_reaches_save(self, endpoints, saved):
        response = endpoints.save(
            manager="shop",
            flyout="edit_customer",
            form_data={"name": "<b>Alice</b>", "email": "nope"},
            item_id=5,
        )
        assert response == {"success": True, "message": "Saved successfully."}
        assert saved == [(5, {"name": "Alice", "email": ""})]

    def test_form_id_wins_over_item_id(self, endpoints, saved):
        endpoints.save(manager="shop", flyout="edit_customer", form_data={"id": "12", "name": "A"}, item_id=5)
        assert saved[0][0] == "12"

    def test_validation_failure(self, endpoints, saved):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.save(manager="shop", flyout="edit_customer", form_data={"name": ""})
        assert exc_info.value.code == "flyout_validation_failed"
        assert exc_info.value.status == 422
        assert saved == []

    def test_save_returns_false(self, endpoints):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.save(manager="shop", flyout="edit_customer", form_data={"name": "fail"})
        assert exc_info.value.code == "flyout_save_failed"

    def test_save_not_configured(self, endpoints):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.save(manager="shop", flyout="view_only", form_data={})
        assert exc_info.value.code == "flyout_save_not_configured"
        assert exc_info.value.status == 500


class TestDelete:
    """Test the delete handler."""

    def test_delete(self, endpoints):
        assert endpoints.delete(manager="shop", flyout="edit_customer", item_id=5)["success"] is True

    def test_delete_fails(self, endpoints):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.delete(manager="shop", flyout="edit_customer", item_id=6)
        assert exc_info.value.code == "flyout_delete_failed"

    def test_delete_not_configured(self, endpoints):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.delete(manager="shop", flyout="view_only", item_id=5)
        assert exc_info.value.code == "flyout_delete_not_configured"


class TestSearch:
    """Test the search handler."""

    def test_search_mode(self, endpoints):
        response = endpoints.search(manager="shop", flyout="edit_customer", field_key="customer", term="al")
        assert response == {"success": True, "results": [{"id": "5", "text": "Alice"}]}

    def test_hydration_mode(self, endpoints):
        response = endpoints.search(
            manager="shop", flyout="edit_customer", field_key="customer", include="5,7,99"
        )
        assert response["results"] == [{"id": "5", "text": "Alice"}, {"id": "7", "text": "Bob"}]

    def test_tags_hydration_by_field_name(self, endpoints):
        response = endpoints.search(
            manager="shop", flyout="edit_customer", field_key="labels", include="5,vip"
        )
        assert response["results"] == [{"id": "5", "text": "Alice"}, {"id": "vip", "text": "vip"}]

    def test_builtin_post_search(self, endpoints):
        response = endpoints.search(manager="shop", flyout="edit_customer", field_key="page", term="pri")
        assert response["results"] == [{"id": "5", "text": "Pricing"}]

    def test_unknown_field(self, endpoints):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.search(manager="shop", flyout="edit_customer", field_key="missing")
        assert exc_info.value.code == "flyout_field_not_found"

    def test_field_without_callback(self, endpoints):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.search(manager="shop", flyout="edit_customer", field_key="plain")
        assert exc_info.value.code == "flyout_search_no_callback"


class TestAction:
    """Test the action handler."""

    def test_action_result_is_merged(self, endpoints):
        response = endpoints.action(
            manager="shop", flyout="edit_customer", action_key="refund", item_id=5, params={"amount": 10}
        )
        assert response == {"success": True, "refunded": 5, "amount": 10}

    def test_unknown_action(self, endpoints):
        with pytest.raises(EndpointError) as exc_info:
            endpoints.action(manager="shop", flyout="edit_customer", action_key="explode")
        assert exc_info.value.code == "flyout_action_not_found"

    def test_non_mapping_result(self):
        registry = FlyoutRegistry()
        registry.get_manager("crm").register_flyout(
            "edit",
            {"fields": {"notes": {"type": "notes", "add_callback": lambda params: True}}},
        )
        response = FlyoutEndpoints(registry).action(manager="crm", flyout="edit", action_key="add_note")
        assert response == {"success": True, "message": "Action completed successfully."}


class TestHandle:
    """Test the (status, body) dispatcher."""

    def test_success(self, endpoints):
        status, body = endpoints.handle("delete", {"manager": "shop", "flyout": "edit_customer", "item_id": 5})
        assert status == 200
        assert body["success"] is True

    def test_error_body(self, endpoints):
        status, body = endpoints.handle("load", {"manager": "shop", "flyout": "missing"})
        assert status == 404
        assert body == {
            "success": False,
            "code": "flyout_not_found",
            "message": 'Flyout "missing" not found.',
            "data": {"status": 404},
        }

    def test_missing_parameter(self, endpoints):
        status, body = endpoints.handle("search", {"manager": "shop", "flyout": "edit_customer"})
        assert status == 400
        assert body["code"] == "rest_missing_callback_param"
        assert "field_key" in body["message"]

    def test_unknown_route(self, endpoints):
        status, body = endpoints.handle("export", {})
        assert status == 404
        assert body["code"] == "rest_no_route"

    def test_extra_params_are_ignored(self, endpoints):
        status, _ = endpoints.handle(
            "delete", {"manager": "shop", "flyout": "edit_customer", "item_id": 5, "_wpnonce": "abc"}
        )
        assert status == 200

    def test_callback_exception(self, registry):
        def broken(item_id):
            raise RuntimeError("database is down")

        registry.get_manager("crm").register_flyout("edit", {"fields": {}, "load": broken})
        status, body = FlyoutEndpoints(registry).handle("load", {"manager": "crm", "flyout": "edit"})
        assert status == 500
        assert body["code"] == "flyout_callback_failed"
        assert "database is down" in body["message"]

    def test_callback_may_raise_endpoint_error(self, registry):
        def load(item_id):
            raise EndpointError("customer_locked", "Customer is locked.", status=409)

        registry.get_manager("crm").register_flyout("edit", {"fields": {}, "load": load})
        status, body = FlyoutEndpoints(registry).handle("load", {"manager": "crm", "flyout": "edit"})
        assert status == 409
        assert body["code"] == "customer_locked"

    def test_sanitize_callback_exception(self, registry):
        def reject(value):
            raise ValueError("bad input")

        saved = []
        registry.get_manager("crm").register_flyout(
            "edit",
            {
                "fields": {"name": {"type": "text", "sanitize_callback": reject}},
                "save": lambda item_id, data: saved.append(data) or True,
            },
        )
        status, body = FlyoutEndpoints(registry).handle(
            "save", {"manager": "crm", "flyout": "edit", "form_data": {"name": "Alice"}}
        )
        assert status == 500
        assert body["code"] == "flyout_callback_failed"
        assert "name.sanitize_callback" in body["message"]
        assert "bad input" in body["message"]
        assert saved == []

    def test_permission_checker_exception(self, registry):
        def auth_down(capability):
            raise RuntimeError("auth backend down")

        registry.get_manager("crm").register_flyout("edit", {"fields": {}})
        registry.permission_checker = auth_down
        status, body = FlyoutEndpoints(registry).handle("load", {"manager": "crm", "flyout": "edit"})
        assert status == 500
        assert body["code"] == "flyout_callback_failed"
        assert "auth backend down" in body["message"]
