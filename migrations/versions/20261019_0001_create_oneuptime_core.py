"""create oneuptime core tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    ]


def _id() -> sa.Column:
    return sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True)


def _bigint_array(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.ARRAY(sa.BigInteger()),
        nullable=False,
        server_default=sa.text("'{}'"),
    )


def _text_array(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.ARRAY(sa.Text()),
        nullable=False,
        server_default=sa.text("'{}'"),
    )


def _project_fk() -> sa.Column:
    return sa.Column(
        "project_id",
        sa.BigInteger(),
        sa.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "projects",
        _id(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column(
            "parent_project_id",
            sa.BigInteger(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=True,
        ),
        *_timestamps(),
    )

    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=30), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "project_users",
        sa.Column(
            "project_id",
            sa.BigInteger(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("project_id", "user_id", name="pk_project_users"),
    )

    op.create_table(
        "teams",
        _id(),
        _project_fk(),
        sa.Column("name", sa.String(length=100), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "team_members",
        sa.Column(
            "team_id",
            sa.BigInteger(),
            sa.ForeignKey("teams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("team_id", "user_id", name="pk_team_members"),
    )

    op.create_table(
        "monitors",
        _id(),
        _project_fk(),
        sa.Column("name", sa.String(length=200), nullable=False),
        _text_array("third_party_variables"),
        *_timestamps(),
    )

    op.create_table(
        "incidents",
        _id(),
        _project_fk(),
        sa.Column(
            "monitor_id",
            sa.BigInteger(),
            sa.ForeignKey("monitors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_by_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("incident_type", sa.String(length=20), nullable=False, server_default="offline"),
        sa.Column("manually_created", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("acknowledged", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("acknowledged_by", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("acknowledged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("acknowledged_by_zapier", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("resolved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("resolved_by", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_by_zapier", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by_zapier", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("internal_note", sa.Text(), nullable=True),
        sa.Column("investigation_note", sa.Text(), nullable=True),
        _bigint_array("not_closed_by"),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "incident_type IN ('online', 'offline', 'degraded')",
            name="ck_incidents_type_valid",
        ),
    )

    op.create_table(
        "incoming_requests",
        _id(),
        _project_fk(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("create_incident", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("filter_criteria", sa.String(length=100), nullable=True),
        sa.Column("filter_condition", sa.String(length=20), nullable=True),
        sa.Column("filter_text", sa.Text(), nullable=True),
        _bigint_array("monitor_ids"),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "filter_condition IS NULL OR filter_condition IN ('equalTo', 'notEqualTo')",
            name="ck_incoming_requests_filter_condition_valid",
        ),
    )

    op.create_table(
        "domains",
        _id(),
        _project_fk(),
        sa.Column("domain", sa.String(length=253), nullable=False),
        sa.Column("domain_verification_text", sa.String(length=100), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "project_smtp_configs",
        _id(),
        _project_fk(),
        sa.Column("hostname", sa.String(length=255), nullable=False),
        sa.Column("port", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=True),
        sa.Column("password", sa.String(length=255), nullable=True),
        sa.Column("from_email", sa.String(length=255), nullable=False),
        sa.Column("from_name", sa.String(length=255), nullable=True),
        sa.Column("secure", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "project_call_sms_configs",
        _id(),
        _project_fk(),
        sa.Column("twilio_account_sid", sa.String(length=100), nullable=False),
        sa.Column("twilio_auth_token", sa.String(length=100), nullable=False),
        sa.Column("twilio_phone_number", sa.String(length=30), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "status_pages",
        _id(),
        _project_fk(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("page_title", sa.String(length=100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("logo_file_id", sa.String(length=100), nullable=True),
        sa.Column("is_public_status_page", sa.Boolean(), nullable=False, server_default=sa.true()),
        _text_array("subscriber_timezones"),
        sa.Column(
            "allow_subscribers_to_choose_resources",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("full_domain", sa.String(length=253), nullable=True),
        sa.Column(
            "smtp_config_id",
            sa.BigInteger(),
            sa.ForeignKey("project_smtp_configs.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "call_sms_config_id",
            sa.BigInteger(),
            sa.ForeignKey("project_call_sms_configs.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )

    op.create_table(
        "status_page_resources",
        _id(),
        sa.Column(
            "status_page_id",
            sa.BigInteger(),
            sa.ForeignKey("status_pages.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "monitor_id",
            sa.BigInteger(),
            sa.ForeignKey("monitors.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("display_name", sa.String(length=200), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "status_page_subscribers",
        _id(),
        sa.Column(
            "status_page_id",
            sa.BigInteger(),
            sa.ForeignKey("status_pages.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("subscriber_email", sa.String(length=255), nullable=True),
        sa.Column("subscriber_phone", sa.String(length=30), nullable=True),
        sa.Column("is_unsubscribed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "is_subscribed_to_all_resources",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        _bigint_array("status_page_resource_ids"),
        *_timestamps(),
    )

    op.create_table(
        "scheduled_maintenances",
        _id(),
        _project_fk(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "should_status_page_subscribers_be_notified_on_event_created",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        sa.Column(
            "is_status_page_subscribers_notified_on_event_scheduled",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        _bigint_array("monitor_ids"),
        _bigint_array("status_page_ids"),
        *_timestamps(),
    )

    op.create_table(
        "status_page_owner_teams",
        _id(),
        sa.Column(
            "status_page_id",
            sa.BigInteger(),
            sa.ForeignKey("status_pages.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "team_id",
            sa.BigInteger(),
            sa.ForeignKey("teams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_owner_notified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "status_page_owner_users",
        _id(),
        sa.Column(
            "status_page_id",
            sa.BigInteger(),
            sa.ForeignKey("status_pages.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_owner_notified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "user_notification_settings",
        sa.Column(
            "user_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("event_type", sa.String(length=100), nullable=False),
        sa.Column("alert_by_email", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("alert_by_sms", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("alert_by_call", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("user_id", "event_type", name="pk_user_notification_settings"),
    )

    op.create_table(
        "notifications",
        _id(),
        _project_fk(),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("created_by", sa.String(length=100), nullable=False),
        sa.Column("icon", sa.String(length=20), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "project_integrations",
        _id(),
        _project_fk(),
        sa.Column("integration_type", sa.String(length=20), nullable=False),
        sa.Column("endpoint_url", sa.Text(), nullable=False),
        _text_array("events"),
        _bigint_array("monitor_ids"),
        *_timestamps(),
        sa.CheckConstraint(
            "integration_type IN ('slack', 'webhook', 'zapier')",
            name="ck_project_integrations_type_valid",
        ),
    )

    op.create_index("idx_incidents_project_id", "incidents", ["project_id"], unique=False)
    op.create_index("idx_incidents_monitor_id", "incidents", ["monitor_id"], unique=False)
    op.create_index(
        "idx_incoming_requests_project_id",
        "incoming_requests",
        ["project_id"],
        unique=False,
    )
    op.create_index(
        "idx_status_page_resources_monitor_id",
        "status_page_resources",
        ["monitor_id"],
        unique=False,
    )
    op.execute(
        "CREATE UNIQUE INDEX uk_domains_project_domain ON domains (project_id, LOWER(domain))"
    )
    op.execute(
        "CREATE INDEX idx_scheduled_maintenances_pending ON scheduled_maintenances (created_at) "
        "WHERE is_status_page_subscribers_notified_on_event_scheduled = false"
    )


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_scheduled_maintenances_pending")
    op.execute("DROP INDEX IF EXISTS uk_domains_project_domain")
    op.drop_index("idx_status_page_resources_monitor_id", table_name="status_page_resources")
    op.drop_index("idx_incoming_requests_project_id", table_name="incoming_requests")
    op.drop_index("idx_incidents_monitor_id", table_name="incidents")
    op.drop_index("idx_incidents_project_id", table_name="incidents")

    for table in (
        "project_integrations",
        "notifications",
        "user_notification_settings",
        "status_page_owner_users",
        "status_page_owner_teams",
        "scheduled_maintenances",
        "status_page_subscribers",
        "status_page_resources",
        "status_pages",
        "project_call_sms_configs",
        "project_smtp_configs",
        "domains",
        "incoming_requests",
        "incidents",
        "monitors",
        "team_members",
        "teams",
        "project_users",
        "users",
        "projects",
    ):
        op.drop_table(table)
