"""initial schema

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-19 09:12:04.118342

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _fk(target: str, ondelete: str = "CASCADE") -> sa.ForeignKey:
    return sa.ForeignKey(target, ondelete=ondelete)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # --- library ---

    op.create_table(
        "exercises",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), _fk("users.id"), nullable=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("category", sa.String(length=60), nullable=True),
        sa.Column("track_weight", sa.Boolean(), nullable=False),
        sa.Column("track_reps", sa.Boolean(), nullable=False),
        sa.Column("track_time", sa.Boolean(), nullable=False),
        sa.Column("track_distance", sa.Boolean(), nullable=False),
        sa.Column("weight_unit", sa.String(length=10), nullable=False),
        sa.Column("distance_unit", sa.String(length=10), nullable=False),
        sa.Column("time_unit", sa.String(length=10), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("url", sa.String(length=500), nullable=True),
        sa.Column("is_system", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "name", name="exercises_user_name_unique"),
    )
    op.create_index("ix_exercises_user_id", "exercises", ["user_id"])
    op.create_index("ix_exercises_is_system", "exercises", ["is_system"])

    op.create_table(
        "hidden_system_exercises",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), _fk("users.id"), nullable=False),
        sa.Column("exercise_id", sa.Integer(), _fk("exercises.id"), nullable=False),
        sa.UniqueConstraint("user_id", "exercise_id", name="hidden_exercises_user_exercise_unique"),
    )
    op.create_index("ix_hidden_system_exercises_user_id", "hidden_system_exercises", ["user_id"])

    op.create_table(
        "circuits",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), _fk("users.id"), nullable=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("rounds", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=60), nullable=True),
        sa.Column("rest_between_exercises_seconds", sa.Integer(), nullable=True),
        sa.Column("rest_between_rounds_seconds", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_system", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_circuits_user_id", "circuits", ["user_id"])
    op.create_index("ix_circuits_is_system", "circuits", ["is_system"])

    op.create_table(
        "circuit_exercises",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("circuit_id", sa.Integer(), _fk("circuits.id"), nullable=False),
        sa.Column("exercise_id", sa.Integer(), _fk("exercises.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("default_reps", sa.Integer(), nullable=True),
        sa.Column("default_weight", sa.Float(), nullable=True),
        sa.Column("default_time_seconds", sa.Integer(), nullable=True),
        sa.Column("rest_after_seconds", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_circuit_exercises_circuit_id", "circuit_exercises", ["circuit_id"])
    op.create_index("ix_circuit_exercises_exercise_id", "circuit_exercises", ["exercise_id"])

    op.create_table(
        "hidden_system_circuits",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), _fk("users.id"), nullable=False),
        sa.Column("circuit_id", sa.Integer(), _fk("circuits.id"), nullable=False),
        sa.UniqueConstraint("user_id", "circuit_id", name="hidden_circuits_user_circuit_unique"),
    )
    op.create_index("ix_hidden_system_circuits_user_id", "hidden_system_circuits", ["user_id"])

    # --- templates ---

    op.create_table(
        "workout_templates",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), _fk("users.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_workout_templates_user_id", "workout_templates", ["user_id"])

    op.create_table(
        "template_circuit_blocks",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("template_id", sa.Integer(), _fk("workout_templates.id"), nullable=False),
        sa.Column("circuit_id", sa.Integer(), _fk("circuits.id", "SET NULL"), nullable=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("rounds", sa.Integer(), nullable=False),
        sa.Column("rest_between_exercises_seconds", sa.Integer(), nullable=True),
        sa.Column("rest_between_rounds_seconds", sa.Integer(), nullable=True),
    )
    op.create_index("ix_template_circuit_blocks_template_id", "template_circuit_blocks", ["template_id"])
    op.create_index("ix_template_circuit_blocks_circuit_id", "template_circuit_blocks", ["circuit_id"])

    op.create_table(
        "workout_template_exercises",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("template_id", sa.Integer(), _fk("workout_templates.id"), nullable=False),
        sa.Column("exercise_id", sa.Integer(), _fk("exercises.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("circuit_block_id", sa.Integer(), _fk("template_circuit_blocks.id"), nullable=True),
        sa.Column("circuit_id", sa.Integer(), nullable=True),
        sa.Column("circuit_rounds", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_workout_template_exercises_template_id", "workout_template_exercises", ["template_id"])
    op.create_index("ix_workout_template_exercises_exercise_id", "workout_template_exercises", ["exercise_id"])
    op.create_index(
        "ix_workout_template_exercises_circuit_block_id", "workout_template_exercises", ["circuit_block_id"]
    )

    op.create_table(
        "planned_sets",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("template_exercise_id", sa.Integer(), _fk("workout_template_exercises.id"), nullable=False),
        sa.Column("set_number", sa.Integer(), nullable=False),
        sa.Column("target_reps", sa.Integer(), nullable=True),
        sa.Column("target_weight", sa.Float(), nullable=True),
        sa.Column("target_time_seconds", sa.Integer(), nullable=True),
        sa.Column("target_distance", sa.Float(), nullable=True),
        sa.Column("rest_seconds", sa.Integer(), nullable=True),
        sa.Column("is_warmup", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_planned_sets_template_exercise_id", "planned_sets", ["template_exercise_id"])

    op.create_table(
        "workout_schedule",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), _fk("users.id"), nullable=False),
        sa.Column("template_id", sa.Integer(), _fk("workout_templates.id"), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="planned"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_workout_schedule_user_id", "workout_schedule", ["user_id"])
    op.create_index("ix_workout_schedule_template_id", "workout_schedule", ["template_id"])
    op.create_index("ix_workout_schedule_scheduled_date", "workout_schedule", ["scheduled_date"])

    # --- sessions ---

    op.create_table(
        "workout_sessions",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), _fk("users.id"), nullable=False),
        sa.Column("template_id", sa.Integer(), _fk("workout_templates.id", "SET NULL"), nullable=True),
        sa.Column("schedule_id", sa.Integer(), _fk("workout_schedule.id", "SET NULL"), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("ended_at", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_workout_sessions_user_id", "workout_sessions", ["user_id"])
    op.create_index("ix_workout_sessions_template_id", "workout_sessions", ["template_id"])
    op.create_index("ix_workout_sessions_schedule_id", "workout_sessions", ["schedule_id"])
    op.create_index("ix_workout_sessions_ended_at", "workout_sessions", ["ended_at"])

    op.create_table(
        "session_circuit_blocks",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("session_id", sa.Integer(), _fk("workout_sessions.id"), nullable=False),
        sa.Column("circuit_id", sa.Integer(), _fk("circuits.id", "SET NULL"), nullable=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("rounds", sa.Integer(), nullable=False),
        sa.Column("rest_between_exercises_seconds", sa.Integer(), nullable=True),
        sa.Column("rest_between_rounds_seconds", sa.Integer(), nullable=True),
    )
    op.create_index("ix_session_circuit_blocks_session_id", "session_circuit_blocks", ["session_id"])

    op.create_table(
        "session_exercises",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("session_id", sa.Integer(), _fk("workout_sessions.id"), nullable=False),
        sa.Column("exercise_id", sa.Integer(), _fk("exercises.id", "SET NULL"), nullable=True),
        sa.Column("exercise_name", sa.String(length=120), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("circuit_block_id", sa.Integer(), _fk("session_circuit_blocks.id"), nullable=True),
        sa.Column("circuit_id", sa.Integer(), nullable=True),
        sa.Column("circuit_rounds", sa.Integer(), nullable=True),
        sa.Column(
            "source_template_exercise_id",
            sa.Integer(),
            _fk("workout_template_exercises.id", "SET NULL"),
            nullable=True,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_session_exercises_session_id", "session_exercises", ["session_id"])
    op.create_index("ix_session_exercises_exercise_id", "session_exercises", ["exercise_id"])
    op.create_index("ix_session_exercises_circuit_block_id", "session_exercises", ["circuit_block_id"])

    op.create_table(
        "performed_sets",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("session_exercise_id", sa.Integer(), _fk("session_exercises.id"), nullable=False),
        sa.Column("set_number", sa.Integer(), nullable=False),
        sa.Column("actual_reps", sa.Integer(), nullable=True),
        sa.Column("actual_weight", sa.Float(), nullable=True),
        sa.Column("actual_time_seconds", sa.Integer(), nullable=True),
        sa.Column("actual_distance", sa.Float(), nullable=True),
        sa.Column("rest_seconds", sa.Integer(), nullable=True),
        sa.Column("is_warmup", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_performed_sets_session_exercise_id", "performed_sets", ["session_exercise_id"])

    # --- supplements / body weight ---

    op.create_table(
        "supplements",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), _fk("users.id"), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("default_dose", sa.String(length=60), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "name", name="supplements_user_name_unique"),
    )
    op.create_index("ix_supplements_user_id", "supplements", ["user_id"])

    op.create_table(
        "supplement_logs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), _fk("users.id"), nullable=False),
        sa.Column("supplement_id", sa.Integer(), _fk("supplements.id"), nullable=False),
        sa.Column("taken_at", sa.DateTime(), nullable=False),
        sa.Column("dose", sa.String(length=60), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_supplement_logs_user_id", "supplement_logs", ["user_id"])
    op.create_index("ix_supplement_logs_supplement_id", "supplement_logs", ["supplement_id"])
    op.create_index("ix_supplement_logs_taken_at", "supplement_logs", ["taken_at"])

    op.create_table(
        "body_weight_logs",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Integer(), _fk("users.id"), nullable=False),
        sa.Column("logged_at", sa.DateTime(), nullable=False),
        sa.Column("weight_lbs", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_body_weight_logs_user_id", "body_weight_logs", ["user_id"])
    op.create_index("ix_body_weight_logs_logged_at", "body_weight_logs", ["logged_at"])


def downgrade() -> None:
    # children first
    for table in (
        "body_weight_logs",
        "supplement_logs",
        "supplements",
        "performed_sets",
        "session_exercises",
        "session_circuit_blocks",
        "workout_sessions",
        "workout_schedule",
        "planned_sets",
        "workout_template_exercises",
        "template_circuit_blocks",
        "workout_templates",
        "hidden_system_circuits",
        "circuit_exercises",
        "circuits",
        "hidden_system_exercises",
        "exercises",
        "users",
    ):
        op.drop_table(table)
