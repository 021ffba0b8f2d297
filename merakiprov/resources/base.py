"""Shared plumbing for Dashboard-backed resources.

``ApiCallMixin`` wraps API calls so that failures become diagnostics.
``SettingsResource`` covers the many "one settings object per parent"
endpoints (GET + PUT, no create/delete on the API side).
``CollectionResource`` covers plain POST/GET/PUT/DELETE collections.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar

from merakiprov.client.transport import http_diagnostics
from merakiprov.exceptions import APIError, DecodeError, NotFoundError
from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.mapping import apply_response, build_payload, split_import_id
from merakiprov.framework.planmodifiers import requires_replace, use_state_for_unknown
from merakiprov.framework.resource import BaseResource, Model
from merakiprov.framework.retry import retry_on_4xx
from merakiprov.framework.schema import StringAttribute
from merakiprov.framework.values import is_known


def id_attribute() -> StringAttribute:
    return StringAttribute(
        computed=True,
        description="Example identifier",
        plan_modifiers=[use_state_for_unknown()],
    )


def network_id_attribute() -> StringAttribute:
    return StringAttribute(
        required=True,
        description="Network Id",
        plan_modifiers=[requires_replace()],
    )


def organization_id_attribute() -> StringAttribute:
    return StringAttribute(
        required=True,
        description="Organization ID",
        plan_modifiers=[requires_replace()],
    )


def serial_attribute() -> StringAttribute:
    return StringAttribute(
        required=True,
        description="The device serial",
        plan_modifiers=[requires_replace()],
    )


class ApiCallMixin:
    """Diagnostic-producing API call helpers shared by resources and data sources."""

    client: Any
    type_name: str
    log: Any
    # first wait of the 4xx retry loop, doubled after every attempt
    retry_delay: ClassVar[float] = 1

    def _call(
        self,
        diags: Diagnostics,
        operation: str,
        fn: Callable[..., tuple[Any, Any]],
        *args: Any,
        expected: int = 200,
        missing_ok: bool = False,
        retries: int = 0,
    ) -> tuple[bool, Any]:
        """Run one client call.

        Returns ``(ok, data)``. ``ok`` is False when an error diagnostic was
        added. With ``missing_ok`` a 404 yields ``(True, None)``.
        """
        if self.client is None:
            diags.add_error("Unconfigured API Client", f"{self.type_name}: {operation} before provider configuration.")
            return False, None
        try:
            if retries:
                data, resp = retry_on_4xx(lambda: fn(*args), max_retries=retries, delay=self.retry_delay)
            else:
                data, resp = fn(*args)
        except NotFoundError as e:
            if missing_ok:
                self.log.info(f"{self.type_name}: remote object is gone ({e.url})")
                return True, None
            diags.add_error(f"HTTP Client Failure: {operation}", http_diagnostics(e))
            return False, None
        except APIError as e:
            diags.add_error(f"HTTP Client Failure: {operation}", http_diagnostics(e))
            return False, None
        except DecodeError as e:
            diags.add_error(f"Failed to decode response: {operation}", str(e))
            return False, None

        if resp.status_code != expected:
            diags.add_error(
                "Unexpected HTTP Response Status Code",
                f"{operation}: expected {expected}, got {resp.status_code}: {resp.text}",
            )
            return False, None
        return True, data

    def _split_import_id(self, import_id: str, diags: Diagnostics, *names: str) -> list[str] | None:
        parts = split_import_id(import_id, *names)
        if parts is None:
            diags.add_error(
                "Unexpected Import Identifier",
                f"Expected import identifier with format: {','.join(names)}. Got: {import_id!r}",
            )
        return parts

    def _require(self, model: Model, diags: Diagnostics, *names: str) -> bool:
        missing = [n for n in names if not is_known(model.get(n))]
        if missing:
            diags.add_error("Missing Required Attribute", f"{self.type_name}: {', '.join(missing)} must be known.")
            return False
        return True


class MerakiResource(ApiCallMixin, BaseResource):
    """Base resource for Dashboard-backed resource types."""


class SettingsResource(MerakiResource):
    """A settings object that always exists below its parent(s).

    Create and update both PUT the settings; delete optionally PUTs
    ``reset_payload`` and otherwise only drops state.
    """

    parent_keys: ClassVar[tuple[str, ...]] = ("network_id",)
    group: ClassVar[str] = "networks"
    get_operation: ClassVar[str] = ""
    update_operation: ClassVar[str] = ""
    retries: ClassVar[int] = 0

    def _parents(self, model: Model) -> list[str]:
        return [str(model[k]) for k in self.parent_keys]

    def _endpoint(self, name: str) -> Callable[..., tuple[Any, Any]]:
        return getattr(getattr(self.client, self.group, None), name, None)

    def to_payload(self, model: Model) -> dict[str, Any]:
        return build_payload(self.schema().attributes, model)

    def from_response(self, model: Model, data: Any, overwrite: bool) -> Model:
        return apply_response(self.schema().attributes, model, data, overwrite=overwrite)

    def reset_payload(self, state: Model) -> dict[str, Any] | None:
        """Body sent on delete; None leaves the remote settings untouched."""
        return None

    def _put(self, plan: Model, diags: Diagnostics) -> Model | None:
        if not self._require(plan, diags, *self.parent_keys):
            return None
        ok, data = self._call(
            diags,
            f"update {self.type_name}",
            self._endpoint(self.update_operation),
            *self._parents(plan),
            self.to_payload(plan),
            retries=self.retries,
        )
        if not ok:
            return None
        model = self.from_response(plan, data, overwrite=False)
        model["id"] = ",".join(self._parents(plan))
        return model

    def create(self, plan: Model, diags: Diagnostics) -> Model | None:
        self.log.debug(f"create {self.type_name} {self._parents(plan)}")
        return self._put(plan, diags)

    def update(self, plan: Model, state: Model, diags: Diagnostics) -> Model | None:
        self.log.debug(f"update {self.type_name} {self._parents(plan)}")
        return self._put(plan, diags)

    def read(self, state: Model, diags: Diagnostics) -> Model | None:
        if not self._require(state, diags, *self.parent_keys):
            return None
        ok, data = self._call(
            diags,
            f"read {self.type_name}",
            self._endpoint(self.get_operation),
            *self._parents(state),
            missing_ok=True,
        )
        if not ok or data is None:
            return None
        model = self.from_response(state, data, overwrite=True)
        model["id"] = ",".join(self._parents(state))
        return model

    def delete(self, state: Model, diags: Diagnostics) -> None:
        body = self.reset_payload(state)
        if body is None:
            self.log.debug(f"delete {self.type_name}: removing from state only")
            return
        self._call(
            diags,
            f"delete {self.type_name}",
            self._endpoint(self.update_operation),
            *self._parents(state),
            body,
        )

    def import_state(self, import_id: str, diags: Diagnostics) -> Model | None:
        parts = self._split_import_id(import_id, diags, *self.parent_keys)
        if parts is None:
            return None
        model = self.schema().empty_model()
        model.update(zip(self.parent_keys, parts))
        model["id"] = ",".join(parts)
        return model


class CollectionResource(MerakiResource):
    """An object in a POST/GET/PUT/DELETE collection below its parent(s)."""

    parent_keys: ClassVar[tuple[str, ...]] = ("network_id",)
    id_key: ClassVar[str] = ""
    group: ClassVar[str] = "networks"
    create_operation: ClassVar[str] = ""
    get_operation: ClassVar[str] = ""
    update_operation: ClassVar[str] = ""
    delete_operation: ClassVar[str] = ""

    def _parents(self, model: Model) -> list[str]:
        return [str(model[k]) for k in self.parent_keys]

    def _endpoint(self, name: str) -> Callable[..., tuple[Any, Any]]:
        return getattr(getattr(self.client, self.group, None), name, None)

    def to_payload(self, model: Model) -> dict[str, Any]:
        return build_payload(self.schema().attributes, model)

    def from_response(self, model: Model, data: Any, overwrite: bool) -> Model:
        model = apply_response(self.schema().attributes, model, data, overwrite=overwrite)
        if model.get(self.id_key) is not None:
            model["id"] = str(model[self.id_key])
        return model

    def create(self, plan: Model, diags: Diagnostics) -> Model | None:
        if not self._require(plan, diags, *self.parent_keys):
            return None
        self.log.debug(f"create {self.type_name} below {self._parents(plan)}")
        ok, data = self._call(
            diags,
            f"create {self.type_name}",
            self._endpoint(self.create_operation),
            *self._parents(plan),
            self.to_payload(plan),
            expected=201,
        )
        if not ok:
            return None
        return self.from_response(plan, data, overwrite=False)

    def _object_args(self, model: Model) -> list[str]:
        return [*self._parents(model), str(model[self.id_key])]

    def read(self, state: Model, diags: Diagnostics) -> Model | None:
        if not self._require(state, diags, *self.parent_keys, self.id_key):
            return None
        ok, data = self._call(
            diags,
            f"read {self.type_name}",
            self._endpoint(self.get_operation),
            *self._object_args(state),
            missing_ok=True,
        )
        if not ok or data is None:
            return None
        return self.from_response(state, data, overwrite=True)

    def update(self, plan: Model, state: Model, diags: Diagnostics) -> Model | None:
        if not is_known(plan.get(self.id_key)):
            plan = {**plan, self.id_key: state.get(self.id_key)}
        if not self._require(plan, diags, *self.parent_keys, self.id_key):
            return None
        self.log.debug(f"update {self.type_name} {self._object_args(plan)}")
        ok, data = self._call(
            diags,
            f"update {self.type_name}",
            self._endpoint(self.update_operation),
            *self._object_args(plan),
            self.to_payload(plan),
        )
        if not ok:
            return None
        return self.from_response(plan, data, overwrite=False)

    def delete(self, state: Model, diags: Diagnostics) -> None:
        if not self._require(state, diags, *self.parent_keys, self.id_key):
            return
        self.log.debug(f"delete {self.type_name} {self._object_args(state)}")
        self._call(
            diags,
            f"delete {self.type_name}",
            self._endpoint(self.delete_operation),
            *self._object_args(state),
            expected=204,
        )

    def import_state(self, import_id: str, diags: Diagnostics) -> Model | None:
        keys = (*self.parent_keys, self.id_key)
        parts = self._split_import_id(import_id, diags, *keys)
        if parts is None:
            return None
        model = self.schema().empty_model()
        model.update(zip(keys, parts))
        model["id"] = parts[-1]
        return model
