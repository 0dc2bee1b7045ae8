"""Declarative registry of the Harvest tools exposed over MCP.

Each tool maps its arguments onto a resource path and a flat parameter bag
and hands them to :class:`~greenhouse_mcp.client.GreenhouseClient`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

from .client import ApiResponse, GreenhouseClient
from .exceptions import GreenhouseError
from .pagination import page_request

JsonDict = Dict[str, Any]
Handler = Callable[[GreenhouseClient, Mapping[str, Any]], ApiResponse[Any]]

PAGINATION_NOTE = "Pass next_cursor value as the 'cursor' parameter to fetch the next page."
DATE_FORMAT_HINT = "Format: operator|ISO8601 (e.g. gte|2024-01-01T00:00:00Z). Operators: gte, lte, gt, lt"


@dataclass(slots=True)
class Tool:
    name: str
    description: str
    schema: Mapping[str, Any]
    handler: Handler

    def call(self, client: GreenhouseClient, arguments: Mapping[str, Any]) -> ApiResponse[Any]:
        return self.handler(client, arguments)

    def describe(self) -> JsonDict:
        return {"name": self.name, "description": self.description, "inputSchema": self.schema}


# ----------------------------------------------------------------------
# Schema fragments
# ----------------------------------------------------------------------

def _string(description: str) -> JsonDict:
    return {"type": "string", "description": description}


def _ids(what: str) -> JsonDict:
    return _string(f"Comma-separated {what} IDs to filter by")


def _boolean(description: str) -> JsonDict:
    return {"type": "boolean", "description": description}


def _integer(description: str) -> JsonDict:
    return {"type": "integer", "description": description}


def _enum(values: List[str], description: str) -> JsonDict:
    return {"type": "string", "enum": values, "description": description}


def _date(what: str) -> JsonDict:
    return _string(f"Filter by {what}. {DATE_FORMAT_HINT}")


PAGINATION_PROPERTIES: JsonDict = {
    "per_page": {
        "type": "integer",
        "minimum": 1,
        "maximum": 500,
        "description": "Results per page (1-500, default 100)",
    },
    "cursor": _string(
        "Pagination cursor from a previous response. When provided, must be the only filter parameter."
    ),
}

DATE_PROPERTIES: JsonDict = {
    "created_at": _date("creation date"),
    "updated_at": _date("update date"),
}


# ----------------------------------------------------------------------
# Argument helpers
# ----------------------------------------------------------------------

def _require_id(arguments: Mapping[str, Any], key: str = "id") -> int:
    value = arguments.get(key)
    if value is None or value == "":
        raise GreenhouseError(f"'{key}' is required")
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise GreenhouseError(f"'{key}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise GreenhouseError(f"'{key}' must be an integer") from exc


def _list_tool(name: str, path: str, description: str, filters: JsonDict | None = None) -> Tool:
    properties: JsonDict = {**PAGINATION_PROPERTIES, **DATE_PROPERTIES, **(filters or {})}
    filter_names = [key for key in properties if key != "cursor"]

    def handler(client: GreenhouseClient, arguments: Mapping[str, Any]) -> ApiResponse[Any]:
        params = {key: arguments.get(key) for key in filter_names}
        request = page_request(params, arguments.get("cursor"))
        return client.fetch_page(path, request)

    return Tool(
        name=name,
        description=description,
        schema={"type": "object", "properties": properties},
        handler=handler,
    )


def _get_tool(name: str, path: str, description: str, id_description: str) -> Tool:
    def handler(client: GreenhouseClient, arguments: Mapping[str, Any]) -> ApiResponse[Any]:
        return client.get(f"{path}/{_require_id(arguments)}")

    return Tool(
        name=name,
        description=description,
        schema={
            "type": "object",
            "required": ["id"],
            "properties": {"id": _integer(id_description)},
        },
        handler=handler,
    )


def _reject_application(client: GreenhouseClient, arguments: Mapping[str, Any]) -> ApiResponse[Any]:
    application_id = _require_id(arguments)
    body: JsonDict = {"rejection_reason_id": _require_id(arguments, "rejection_reason_id")}
    if arguments.get("notes"):
        body["notes"] = arguments["notes"]
    rejection_email = arguments.get("rejection_email")
    if rejection_email is not None:
        if not isinstance(rejection_email, Mapping):
            raise GreenhouseError("'rejection_email' must be an object")
        email = {
            key: rejection_email[key]
            for key in ("send_email_at", "email_template_id", "email_from_user_id")
            if rejection_email.get(key) is not None
        }
        body["rejection_email"] = email
    return client.post(f"/applications/{application_id}/reject", body)


REJECT_APPLICATION_SCHEMA: JsonDict = {
    "type": "object",
    "required": ["id", "rejection_reason_id"],
    "properties": {
        "id": _integer("The application ID to reject"),
        "rejection_reason_id": _integer(
            "The ID of the rejection reason (use list_rejection_reasons to find valid IDs)"
        ),
        "notes": _string("Additional notes about the rejection"),
        "rejection_email": {
            "type": "object",
            "description": "Optional rejection email configuration",
            "properties": {
                "send_email_at": _string("Scheduled time to send rejection email (ISO 8601 datetime)"),
                "email_template_id": _integer("Template ID for the rejection email"),
                "email_from_user_id": _integer("User ID to send the rejection email from"),
            },
        },
    },
}

LAST_ACTIVITY = _date("last activity date")
CUSTOM_FIELD_OPTION = _integer("Filter by custom field option ID")
ACTIVE = _boolean("Filter by active status")
JOB_IDS = _ids("job")


def build_tools() -> Dict[str, Tool]:
    """Return the tool registry keyed by tool name."""

    tools = [
        _list_tool(
            "list_applications",
            "/applications",
            "List applications in Greenhouse. Returns application details including status, candidate, "
            "job, stage, and answers. Status can be active, rejected, hired, or converted.",
            {
                "ids": _ids("application"),
                "candidate_ids": _ids("candidate"),
                "job_ids": JOB_IDS,
                "prospective_job_ids": _ids("prospective job"),
                "job_post_ids": _ids("job post"),
                "source_ids": _ids("source"),
                "referrer_ids": _ids("referrer"),
                "stage_ids": _ids("interview stage"),
                "stage_name": _string("Filter applications by current stage name (exact match)"),
                "status": _enum(["active", "rejected", "hired", "converted"], "Filter by application status"),
                "prospect": _boolean("Filter by prospect status (true for prospects, false for applicants)"),
                "last_activity_at": LAST_ACTIVITY,
                "custom_field_option_id": CUSTOM_FIELD_OPTION,
            },
        ),
        _get_tool(
            "get_application",
            "/applications",
            "Get a single application by ID. Returns full application details including status, "
            "candidate, job, stage, and answers.",
            "The application ID",
        ),
        Tool(
            name="reject_application",
            description="Reject an application in Greenhouse. Requires the application ID and a rejection "
            "reason ID. Optionally include notes and rejection email configuration.",
            schema=REJECT_APPLICATION_SCHEMA,
            handler=_reject_application,
        ),
        _list_tool(
            "list_applied_candidate_tags",
            "/applied_candidate_tags",
            "List applied candidate tags in Greenhouse. Shows which tags have been applied to which candidates.",
            {
                "ids": _ids("applied candidate tag"),
                "candidate_ids": _ids("candidate"),
                "candidate_tag_ids": _ids("candidate tag"),
            },
        ),
        _list_tool(
            "list_application_stages",
            "/application_stages",
            "List application stages from Greenhouse. Shows which interview stage each application is in, "
            "when they entered/exited, and whether it's their current stage.",
            {
                "ids": _ids("application stage"),
                "application_ids": _ids("application"),
                "job_interview_stage_ids": _ids("job interview stage"),
                "current": _boolean("Filter to only current (true) or non-current (false) stages"),
            },
        ),
        _list_tool(
            "list_attachments",
            "/attachments",
            "List file attachments in Greenhouse. Returns attachment metadata including filename, type "
            "(resume, cover_letter, etc.), and a signed download URL. URLs expire after 7 days.",
            {
                "ids": _ids("attachment"),
                "candidate_ids": _ids("candidate"),
                "application_ids": _ids("application"),
                "type": _enum(
                    [
                        "resume",
                        "cover_letter",
                        "take_home_test",
                        "offer_packet",
                        "offer_letter",
                        "signed_offer_letter",
                        "other",
                        "form_attachment",
                        "midfunnel_agreement",
                        "automated_agreement",
                    ],
                    "Filter by attachment type",
                ),
            },
        ),
        _list_tool(
            "list_candidate_tags",
            "/candidate_tags",
            "List all candidate tags defined in Greenhouse. Tags are labels that can be applied to "
            "candidates for categorization.",
            {"ids": _ids("candidate tag")},
        ),
        _list_tool(
            "list_candidates",
            "/candidates",
            "List candidates in Greenhouse. Returns candidate profiles including name, contact info, tags, "
            "and custom fields.",
            {
                "ids": _ids("candidate"),
                "last_activity_at": LAST_ACTIVITY,
                "custom_field_option_id": CUSTOM_FIELD_OPTION,
                "private": _boolean("Filter by private/confidential status"),
                "email": _string("Filter by email address"),
                "tag": _string("Filter by candidate tag name"),
            },
        ),
        _get_tool(
            "get_candidate",
            "/candidates",
            "Get a single candidate by ID. Returns full candidate profile including name, contact info, "
            "tags, and custom fields.",
            "The candidate ID",
        ),
        _list_tool(
            "list_close_reasons",
            "/close_reasons",
            "List all close reasons in Greenhouse. Close reasons are used when closing a job to indicate "
            "why it was closed.",
            {"ids": _ids("close reason")},
        ),
        _list_tool(
            "list_email_templates",
            "/email_templates",
            "List email templates in Greenhouse. Returns template details including name, subject, body, "
            "and email type.",
            {
                "ids": _ids("email template"),
                "email_type": _string(
                    "Filter by email template type (e.g. candidate_rejection, candidate_email, "
                    "take_home_test_email, scorecard_reminder, etc.)"
                ),
            },
        ),
        _list_tool(
            "list_job_board_custom_locations",
            "/job_board_custom_locations",
            "List custom locations defined on job boards in Greenhouse.",
            {
                "ids": _ids("location"),
                "greenhouse_job_board_ids": _ids("job board"),
                "active": ACTIVE,
            },
        ),
        _list_tool(
            "list_job_candidate_attributes",
            "/job_candidate_attributes",
            "List candidate attributes configured on jobs in Greenhouse. These define the evaluation "
            "criteria for candidates on a specific job.",
            {
                "ids": _ids("attribute"),
                "job_ids": JOB_IDS,
                "candidate_attribute_type_ids": _ids("candidate attribute type"),
            },
        ),
        _list_tool(
            "list_job_hiring_managers",
            "/job_hiring_managers",
            "List hiring managers assigned to jobs in Greenhouse.",
            {
                "ids": _ids("hiring manager assignment"),
                "job_ids": JOB_IDS,
                "user_ids": _ids("user"),
            },
        ),
        _list_tool(
            "list_job_interview_stages",
            "/job_interview_stages",
            "List interview stages (pipeline stages) configured on jobs in Greenhouse. Shows the interview "
            "pipeline structure.",
            {"ids": _ids("stage"), "job_ids": JOB_IDS, "active": ACTIVE},
        ),
        _list_tool(
            "list_job_interviews",
            "/job_interviews",
            "List interviews configured on jobs in Greenhouse. Shows interview details including "
            "scheduling type, duration, and instructions.",
            {
                "ids": _ids("interview"),
                "job_ids": JOB_IDS,
                "job_interview_stage_ids": _ids("interview stage"),
                "active": ACTIVE,
                "scheduling_type": _enum(
                    ["none", "needs_scheduling", "take_home_test", "offer"],
                    "Filter by scheduling type",
                ),
            },
        ),
        _list_tool(
            "list_job_notes",
            "/job_notes",
            "List notes on jobs in Greenhouse. Notes contain comments/observations about jobs made by team "
            "members.",
            {
                "ids": _ids("note"),
                "job_ids": JOB_IDS,
                "user_ids": _string("Comma-separated user IDs to filter by (note authors)"),
                "visibility": _enum(["admin_only_visible", "privately_visible"], "Filter by visibility level"),
            },
        ),
        _list_tool(
            "list_job_owners",
            "/job_owners",
            "List owners (recruiters, sourcers, coordinators) assigned to jobs in Greenhouse.",
            {
                "ids": _ids("owner assignment"),
                "job_ids": JOB_IDS,
                "user_ids": _ids("user"),
                "type": _enum(["sourcer", "recruiter", "coordinator"], "Filter by owner type"),
            },
        ),
        _list_tool(
            "list_job_post_locations",
            "/job_post_locations",
            "List locations associated with job posts in Greenhouse.",
            {
                "ids": _ids("location"),
                "job_post_ids": _ids("job post"),
                "office_ids": _ids("office"),
                "custom_location_ids": _ids("custom location"),
                "type": _enum(["free_text", "office", "custom_list"], "Filter by location type"),
                "plain_text_location": _string("Filter by plain text location value"),
            },
        ),
        _list_tool(
            "list_job_posts",
            "/job_posts",
            "List job posts in Greenhouse. Job posts are the public or internal postings of a job, "
            "including title, content, and questions.",
            {
                "ids": _ids("job post"),
                "job_ids": JOB_IDS,
                "job_board_ids": _ids("job board"),
                "active": ACTIVE,
                "live": _boolean("Filter by live status (live post on a live job board)"),
                "featured": _boolean("Filter by featured status"),
                "internal": _boolean("Filter by internal posting status"),
            },
        ),
        _list_tool(
            "list_jobs",
            "/jobs",
            "List jobs in Greenhouse. Returns job details including name, status, department, offices, "
            "and custom fields.",
            {
                "ids": _ids("job"),
                "status": _enum(["open", "draft", "closed"], "Filter by job status"),
                "department_id": _integer("Filter by department ID"),
                "office_id": _integer("Filter by office ID"),
                "requisition_id": _string("Filter by requisition ID"),
                "confidential": _boolean("Filter by confidential status"),
                "custom_field_option_id": CUSTOM_FIELD_OPTION,
                "opened_at": _date("job open date"),
                "closed_at": _date("job close date"),
            },
        ),
        _get_tool(
            "get_job",
            "/jobs",
            "Get a single job by ID. Returns full job details including name, status, department, "
            "offices, and custom fields.",
            "The job ID",
        ),
        _list_tool(
            "list_rejection_details",
            "/rejection_details",
            "List rejection details for applications in Greenhouse. Shows who rejected, the reason, and "
            "any rejection notes.",
            {
                "ids": _ids("rejection detail"),
                "application_ids": _ids("application"),
                "rejection_reason_ids": _ids("rejection reason"),
                "custom_field_option_id": CUSTOM_FIELD_OPTION,
            },
        ),
        _list_tool(
            "list_rejection_reasons",
            "/rejection_reasons",
            "List all rejection reasons in Greenhouse. These are the predefined reasons available when "
            "rejecting candidates.",
            {
                "ids": _ids("rejection reason"),
                "include_defaults": _boolean("Include default rejection reasons"),
            },
        ),
    ]
    return {tool.name: tool for tool in tools}


def format_result(response: ApiResponse[Any]) -> JsonDict:
    """Render an envelope as an MCP tool result with one text content item."""

    result: JsonDict = {"data": response.data}
    if response.next_cursor:
        result["next_cursor"] = response.next_cursor
        result["_pagination_note"] = PAGINATION_NOTE
    return {"content": [{"type": "text", "text": json.dumps(result, indent=2)}]}


__all__ = ["PAGINATION_NOTE", "Tool", "build_tools", "format_result"]
