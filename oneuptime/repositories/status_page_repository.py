from typing import Any

from psycopg import Connection

from oneuptime.models.entities import (
    CallSmsConfigEntity,
    SmtpConfigEntity,
    StatusPageEntity,
    StatusPageResourceEntity,
    StatusPageSubscriberEntity,
)
from oneuptime.repositories.base import BaseRepository

_SELECT_STATUS_PAGE = """
    SELECT
        sp.id,
        sp.project_id,
        p.name AS project_name,
        sp.name,
        sp.page_title,
        sp.description,
        sp.logo_file_id,
        sp.is_public_status_page,
        sp.subscriber_timezones,
        sp.allow_subscribers_to_choose_resources,
        sp.full_domain,
        sc.id AS smtp_id,
        sc.hostname AS smtp_hostname,
        sc.port AS smtp_port,
        sc.username AS smtp_username,
        sc.password AS smtp_password,
        sc.from_email AS smtp_from_email,
        sc.from_name AS smtp_from_name,
        sc.secure AS smtp_secure,
        cc.id AS call_sms_id,
        cc.twilio_account_sid,
        cc.twilio_auth_token,
        cc.twilio_phone_number
    FROM status_pages sp
    JOIN projects p ON p.id = sp.project_id
    LEFT JOIN project_smtp_configs sc ON sc.id = sp.smtp_config_id
    LEFT JOIN project_call_sms_configs cc ON cc.id = sp.call_sms_config_id
"""


def _to_status_page_entity(row: dict[str, Any]) -> StatusPageEntity:
    smtp_config = None
    if row["smtp_id"] is not None:
        smtp_config = SmtpConfigEntity(
            id=row["smtp_id"],
            hostname=row["smtp_hostname"],
            port=row["smtp_port"],
            username=row["smtp_username"],
            password=row["smtp_password"],
            from_email=row["smtp_from_email"],
            from_name=row["smtp_from_name"],
            secure=row["smtp_secure"],
        )

    call_sms_config = None
    if row["call_sms_id"] is not None:
        call_sms_config = CallSmsConfigEntity(
            id=row["call_sms_id"],
            twilio_account_sid=row["twilio_account_sid"],
            twilio_auth_token=row["twilio_auth_token"],
            twilio_phone_number=row["twilio_phone_number"],
        )

    return StatusPageEntity(
        id=row["id"],
        project_id=row["project_id"],
        name=row["name"],
        page_title=row["page_title"],
        description=row["description"],
        logo_file_id=row["logo_file_id"],
        is_public_status_page=row["is_public_status_page"],
        subscriber_timezones=list(row["subscriber_timezones"] or []),
        allow_subscribers_to_choose_resources=row["allow_subscribers_to_choose_resources"],
        full_domain=row["full_domain"],
        project_name=row["project_name"],
        smtp_config=smtp_config,
        call_sms_config=call_sms_config,
    )


def _to_resource_entity(row: dict[str, Any]) -> StatusPageResourceEntity:
    return StatusPageResourceEntity(
        id=row["id"],
        status_page_id=row["status_page_id"],
        monitor_id=row["monitor_id"],
        display_name=row["display_name"],
    )


def _to_subscriber_entity(row: dict[str, Any]) -> StatusPageSubscriberEntity:
    return StatusPageSubscriberEntity(
        id=row["id"],
        status_page_id=row["status_page_id"],
        subscriber_email=row["subscriber_email"],
        subscriber_phone=row["subscriber_phone"],
        is_unsubscribed=row["is_unsubscribed"],
        is_subscribed_to_all_resources=row["is_subscribed_to_all_resources"],
        status_page_resource_ids=list(row["status_page_resource_ids"] or []),
    )


class StatusPageRepository(BaseRepository):
    def get_by_id(
        self,
        status_page_id: int,
        connection: Connection | None = None,
    ) -> StatusPageEntity | None:
        query = f"{_SELECT_STATUS_PAGE} WHERE sp.id = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (status_page_id,))
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_status_page_entity(row)

    def list_by_ids(
        self,
        status_page_ids: list[int],
        connection: Connection | None = None,
    ) -> list[StatusPageEntity]:
        if not status_page_ids:
            return []

        query = f"{_SELECT_STATUS_PAGE} WHERE sp.id = ANY(%s) ORDER BY sp.id ASC"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (status_page_ids,))
                rows = cursor.fetchall()
        return [_to_status_page_entity(row) for row in rows]

    def list_resources_by_monitor_ids(
        self,
        monitor_ids: list[int],
        connection: Connection | None = None,
    ) -> list[StatusPageResourceEntity]:
        if not monitor_ids:
            return []

        query = """
            SELECT id, status_page_id, monitor_id, display_name
            FROM status_page_resources
            WHERE monitor_id = ANY(%s)
            ORDER BY id ASC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (monitor_ids,))
                rows = cursor.fetchall()
        return [_to_resource_entity(row) for row in rows]

    def list_subscribers(
        self,
        status_page_id: int,
        *,
        include_unsubscribed: bool = False,
        connection: Connection | None = None,
    ) -> list[StatusPageSubscriberEntity]:
        query = """
            SELECT
                id,
                status_page_id,
                subscriber_email,
                subscriber_phone,
                is_unsubscribed,
                is_subscribed_to_all_resources,
                status_page_resource_ids
            FROM status_page_subscribers
            WHERE status_page_id = %s
        """
        if not include_unsubscribed:
            query += " AND is_unsubscribed = false"
        query += " ORDER BY id ASC"

        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (status_page_id,))
                rows = cursor.fetchall()
        return [_to_subscriber_entity(row) for row in rows]
