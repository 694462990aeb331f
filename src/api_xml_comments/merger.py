"""Operation filter that merges XML comments into API operations."""

import logging

from api_xml_comments.comments.ids import comment_id_for_method, comment_id_for_property
from api_xml_comments.comments.index import CommentIndex, CommentMember
from api_xml_comments.comments.text import humanize_element
from api_xml_comments.config import MergeSettings
from api_xml_comments.parser.base import ApiOperation, ApiParameter, ApiResponse
from api_xml_comments.parser.bindings import ApiDescription, Bindings, OperationFilterContext

logger = logging.getLogger(__name__)


class XmlCommentsOperationFilter:
    """Copies method, parameter, response and property comments onto operations.

    Only fields with matching comments are touched, so applying the filter
    twice leaves the operation as it was after the first pass.
    """

    def __init__(self, index: CommentIndex, settings: MergeSettings | None = None):
        self.index = index
        self.settings = settings or MergeSettings()

    def apply(self, operation: ApiOperation, context: OperationFilterContext) -> None:
        """Merge comments for one operation in place."""
        api_description = context.api_description
        if api_description.method is not None:
            comment_id = comment_id_for_method(api_description.method)
            member = self.index.find(comment_id)
            if member is not None:
                logger.debug("Merging %s into %s", comment_id, operation.key)
                self._apply_method_comments(operation, member)
                self._apply_param_comments(operation.parameters, member, api_description)
                self._apply_response_comments(operation.responses, member)
            else:
                logger.debug("No comments for %s", comment_id)

        # Property comments run last and win over <param> text
        self._apply_property_comments(operation.parameters, api_description)

    def apply_all(self, operations: list[ApiOperation], bindings: Bindings) -> int:
        """Apply to every operation with a binding. Returns how many were processed."""
        count = 0
        for operation in operations:
            api_description = bindings.find(operation)
            if api_description is None:
                logger.debug("No binding for %s", operation.key)
                continue
            self.apply(operation, OperationFilterContext(api_description=api_description))
            count += 1
        return count

    def _humanize(self, element) -> str:
        return humanize_element(element, cref_style=self.settings.cref_style)

    def _apply_method_comments(self, operation: ApiOperation, member: CommentMember) -> None:
        summary = member.summary
        if summary is not None:
            operation.summary = self._humanize(summary)

        remarks = member.remarks
        if remarks is not None:
            operation.description = self._humanize(remarks)

    def _apply_param_comments(
        self,
        parameters: list[ApiParameter],
        member: CommentMember,
        api_description: ApiDescription,
    ) -> None:
        for parameter in parameters:
            action_parameter = next(
                (
                    p
                    for p in api_description.parameters
                    if p.bound_name.lower() == parameter.name.lower()
                ),
                None,
            )
            if action_parameter is None:
                continue

            # <param name="..."> must match the declared name exactly
            param_node = member.param(action_parameter.name)
            if param_node is not None:
                parameter.description = self._humanize(param_node)

    def _apply_response_comments(self, responses: dict[str, ApiResponse], member: CommentMember) -> None:
        for code, node in member.responses():
            if code is None:
                logger.debug("Ignoring <response> without a code in %s", member.name)
                continue
            response = responses.get(code)
            if response is None:
                response = responses[code] = ApiResponse()
            response.description = self._humanize(node)

    def _apply_property_comments(self, parameters: list[ApiParameter], api_description: ApiDescription) -> None:
        property_bound = [p for p in api_description.parameter_descriptions if p.is_property_bound]
        if not property_bound:
            return

        for parameter in parameters:
            description = next(
                (p for p in property_bound if p.name.lower() == parameter.name.lower()),
                None,
            )
            if description is None:
                continue

            comment_id = comment_id_for_property(description.property_identity())
            member = self.index.find(comment_id)
            if member is None:
                logger.debug("No comments for %s", comment_id)
                continue

            summary = member.summary
            if summary is not None:
                parameter.description = self._humanize(summary)
