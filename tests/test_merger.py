from pathlib import Path

from api_xml_comments.comments.index import CommentIndex, load_comments
from api_xml_comments.config import MergeSettings
from api_xml_comments.merger import XmlCommentsOperationFilter
from api_xml_comments.parser.base import ApiOperation, ApiParameter, ApiResponse
from api_xml_comments.parser.bindings import (
    ActionParameter,
    ApiDescription,
    Bindings,
    OperationFilterContext,
    ParameterDescription,
)
from api_xml_comments.comments.ids import MethodIdentity

FIXTURES = Path(__file__).parent / "fixtures"

COMMENTS = """
<doc>
  <members>
    <member name="M:Shop.OrdersController.Get(System.Int32,Shop.OrderQuery)">
      <summary>
      Gets an order.
      </summary>
      <remarks>Uses the <c>id</c> route value.</remarks>
      <param name="id">The order id.</param>
      <param name="Status">Status from param element.</param>
      <param name="query">The query.</param>
      <response code="200">The order.</response>
      <response code="404">No order with that <paramref name="id"/>.</response>
    </member>
    <member name="P:Shop.OrderQuery.Status">
      <summary>Status from the property.</summary>
    </member>
    <member name="P:Shop.OrderQuery.Page">
      <remarks>No summary here.</remarks>
    </member>
  </members>
</doc>
"""


def _operation() -> ApiOperation:
    return ApiOperation(
        method="GET",
        path="/orders/{id}",
        operation_id="getOrder",
        summary="Original summary",
        description="Original description",
        parameters=[
            ApiParameter(name="Id", location="path", description="orig id"),
            ApiParameter(name="status", location="query", description="orig status"),
            ApiParameter(name="page", location="query", description="orig page"),
        ],
        responses={"200": ApiResponse(description="OK")},
    )


def _api_description(**overrides) -> ApiDescription:
    fields = {
        "method": MethodIdentity(
            declaring_type="Shop.OrdersController",
            name="Get",
            parameter_types=["System.Int32", "Shop.OrderQuery"],
        ),
        "parameters": [ActionParameter(name="id"), ActionParameter(name="query")],
        "parameter_descriptions": [],
    }
    fields.update(overrides)
    return ApiDescription(**fields)


def _context(api_description: ApiDescription) -> OperationFilterContext:
    return OperationFilterContext(api_description=api_description)


def _filter() -> XmlCommentsOperationFilter:
    return XmlCommentsOperationFilter(CommentIndex.from_string(COMMENTS))


class TestMethodComments:
    def test_summary_and_remarks_overwrite(self):
        op = _operation()
        _filter().apply(op, _context(_api_description()))
        assert op.summary == "Gets an order."
        assert op.description == "Uses the `id` route value."

    def test_parameter_name_match_is_case_insensitive(self):
        op = _operation()
        _filter().apply(op, _context(_api_description()))
        assert op.parameters[0].description == "The order id."

    def test_binder_model_name_preferred(self):
        op = _operation()
        op.parameters[1].name = "state"
        api = _api_description(parameters=[ActionParameter(name="id"), ActionParameter(name="query", binder_model_name="STATE")])
        _filter().apply(op, _context(api))
        assert op.parameters[1].description == "The query."

    def test_param_element_match_is_case_sensitive(self):
        # The comment documents "Status" but the declared parameter is "status"
        op = _operation()
        api = _api_description(parameters=[ActionParameter(name="status")])
        _filter().apply(op, _context(api))
        assert op.parameters[1].description == "orig status"

    def test_unmatched_parameters_untouched(self):
        op = _operation()
        _filter().apply(op, _context(_api_description()))
        assert op.parameters[2].description == "orig page"

    def test_existing_response_overwritten(self):
        op = _operation()
        _filter().apply(op, _context(_api_description()))
        assert op.responses["200"].description == "The order."

    def test_new_response_code_created(self):
        op = _operation()
        assert "404" not in op.responses
        _filter().apply(op, _context(_api_description()))
        assert op.responses["404"].description == "No order with that id."
        assert list(op.responses) == ["200", "404"]

    def test_no_match_leaves_operation_unchanged(self):
        op = _operation()
        before = op.model_dump()
        api = _api_description(method=MethodIdentity(declaring_type="Shop.OrdersController", name="Missing"))
        _filter().apply(op, _context(api))
        assert op.model_dump() == before


class TestPropertyComments:
    def _property_bound(self, name="status", prop="Status"):
        return ParameterDescription(name=name, container_type="Shop.OrderQuery", property_name=prop)

    def test_property_summary_wins_over_param(self):
        op = _operation()
        api = _api_description(
            parameters=[ActionParameter(name="Status")],
            parameter_descriptions=[self._property_bound()],
        )
        _filter().apply(op, _context(api))
        assert op.parameters[1].description == "Status from the property."

    def test_property_name_match_is_case_insensitive(self):
        op = _operation()
        api = _api_description(parameter_descriptions=[self._property_bound(name="STATUS")])
        _filter().apply(op, _context(api))
        assert op.parameters[1].description == "Status from the property."

    def test_runs_without_method_identity(self):
        op = _operation()
        api = _api_description(method=None, parameter_descriptions=[self._property_bound()])
        _filter().apply(op, _context(api))
        assert op.summary == "Original summary"
        assert op.parameters[0].description == "orig id"
        assert op.parameters[1].description == "Status from the property."

    def test_runs_when_method_not_documented(self):
        op = _operation()
        api = _api_description(
            method=MethodIdentity(declaring_type="Shop.OrdersController", name="Missing"),
            parameter_descriptions=[self._property_bound()],
        )
        _filter().apply(op, _context(api))
        assert op.parameters[1].description == "Status from the property."

    def test_property_without_summary_ignored(self):
        op = _operation()
        api = _api_description(parameter_descriptions=[self._property_bound(name="page", prop="Page")])
        _filter().apply(op, _context(api))
        assert op.parameters[2].description == "orig page"

    def test_descriptions_without_property_metadata_ignored(self):
        op = _operation()
        api = _api_description(
            method=None,
            parameter_descriptions=[ParameterDescription(name="status", property_name="Status")],
        )
        _filter().apply(op, _context(api))
        assert op.parameters[1].description == "orig status"


class TestIdempotence:
    def test_second_pass_changes_nothing(self):
        op = _operation()
        api = _api_description(parameter_descriptions=[
            ParameterDescription(name="status", container_type="Shop.OrderQuery", property_name="Status"),
        ])
        merger = _filter()
        merger.apply(op, _context(api))
        once = op.model_dump()
        merger.apply(op, _context(api))
        assert op.model_dump() == once


class TestApplyAll:
    def test_uses_bindings_by_operation_id_and_key(self):
        index = load_comments(FIXTURES / "PetStore.xml")
        bindings = Bindings.model_validate({
            "operations": {
                "getOrder": _api_description(method=None).model_dump(),
                "DELETE /orders/{id}": {"method": None},
            }
        })
        ops = [_operation(), ApiOperation(method="DELETE", path="/orders/{id}"), ApiOperation(method="PUT", path="/x")]
        assert XmlCommentsOperationFilter(index).apply_all(ops, bindings) == 2


class TestSettings:
    def test_short_cref_style(self):
        index = CommentIndex.from_string(
            '<doc><members><member name="M:A.B.Run">'
            '<summary>Runs <see cref="T:A.Widget"/>.</summary>'
            "</member></members></doc>"
        )
        op = ApiOperation(method="POST", path="/run")
        api = ApiDescription(method=MethodIdentity(declaring_type="A.B", name="Run"))
        XmlCommentsOperationFilter(index, MergeSettings(cref_style="short")).apply(op, _context(api))
        assert op.summary == "Runs Widget."

    def test_cref_style_from_environment(self, monkeypatch):
        monkeypatch.setenv("API_XML_COMMENTS_CREF_STYLE", "short")
        assert MergeSettings().cref_style == "short"
