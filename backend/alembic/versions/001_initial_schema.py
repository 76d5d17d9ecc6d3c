"""Initial schema: tournament, tournamentgroup, participant, match tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create tournament table
    op.create_table(
        "tournament",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("format", sa.String(), nullable=False),
        sa.Column("match_format", sa.String(), nullable=False, server_default="best_of_3"),
        sa.Column("max_participants", sa.Integer(), nullable=False),
        sa.Column("phase", sa.String(), nullable=False, server_default="enrollment"),
        sa.Column("group_count", sa.Integer(), nullable=True),
        sa.Column("group_size", sa.Integer(), nullable=True),
        sa.Column("qualifiers_per_group", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tournament_phase", "tournament", ["phase"])

    # Create tournamentgroup table
    op.create_table(
        "tournamentgroup",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("group_order", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.UniqueConstraint("tournament_id", "group_order", name="uq_tournament_group_order"),
    )
    op.create_index("ix_tournamentgroup_tournament_id", "tournamentgroup", ["tournament_id"])

    # Create participant table
    op.create_table(
        "participant",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("player_name", sa.String(), nullable=False),
        sa.Column("seed", sa.Integer(), nullable=True),
        sa.Column("group_id", sa.Integer(), nullable=True),
        sa.Column("group_slot", sa.Integer(), nullable=True),
        sa.Column("group_position", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["group_id"], ["tournamentgroup.id"]),
        sa.UniqueConstraint("tournament_id", "seed", name="uq_tournament_seed"),
        sa.UniqueConstraint("tournament_id", "player_id", name="uq_tournament_player"),
    )
    op.create_index("ix_participant_tournament_id", "participant", ["tournament_id"])
    op.create_index("ix_participant_group_id", "participant", ["group_id"])

    # Create match table
    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=True),
        sa.Column("stage", sa.String(), nullable=False),
        sa.Column("round_label", sa.String(), nullable=False),
        sa.Column("round_order", sa.Integer(), nullable=False),
        sa.Column("bracket_position", sa.Integer(), nullable=False),
        sa.Column("match_number", sa.Integer(), nullable=False),
        sa.Column("participant_a_id", sa.Integer(), nullable=True),
        sa.Column("participant_b_id", sa.Integer(), nullable=True),
        sa.Column("placeholder_side_a", sa.String(), nullable=False),
        sa.Column("placeholder_side_b", sa.String(), nullable=False),
        sa.Column("source_match_a_id", sa.Integer(), nullable=True),
        sa.Column("source_match_b_id", sa.Integer(), nullable=True),
        sa.Column("is_bye", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(), nullable=False, server_default="scheduled"),
        sa.Column("sets_json", sa.JSON(), nullable=True),
        sa.Column("winner_participant_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["group_id"], ["tournamentgroup.id"]),
        sa.ForeignKeyConstraint(["participant_a_id"], ["participant.id"]),
        sa.ForeignKeyConstraint(["participant_b_id"], ["participant.id"]),
        sa.ForeignKeyConstraint(["winner_participant_id"], ["participant.id"]),
        sa.ForeignKeyConstraint(["source_match_a_id"], ["match.id"]),
        sa.ForeignKeyConstraint(["source_match_b_id"], ["match.id"]),
        sa.UniqueConstraint("tournament_id", "match_number", name="uq_tournament_match_number"),
    )
    op.create_index("ix_match_tournament_id", "match", ["tournament_id"])
    op.create_index("ix_match_group_id", "match", ["group_id"])


def downgrade() -> None:
    op.drop_index("ix_match_group_id", table_name="match")
    op.drop_index("ix_match_tournament_id", table_name="match")
    op.drop_table("match")
    op.drop_index("ix_participant_group_id", table_name="participant")
    op.drop_index("ix_participant_tournament_id", table_name="participant")
    op.drop_table("participant")
    op.drop_index("ix_tournamentgroup_tournament_id", table_name="tournamentgroup")
    op.drop_table("tournamentgroup")
    op.drop_index("ix_tournament_phase", table_name="tournament")
    op.drop_table("tournament")
