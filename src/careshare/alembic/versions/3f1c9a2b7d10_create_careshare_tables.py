"""create_careshare_tables

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2025-10-04 11:02:17.431802

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'seniors',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.Text(), nullable=True),
        sa.Column('last_name', sa.Text(), nullable=True),
        sa.Column('phone_number', sa.String(length=32), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('street_address', sa.Text(), nullable=True),
        sa.Column('city', sa.Text(), nullable=True),
        sa.Column('state', sa.Text(), nullable=True),
        sa.Column('zip_code', sa.String(length=10), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_seniors_phone_number', 'seniors', ['phone_number'], unique=True)

    op.create_table(
        'skills',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table(
        'volunteers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.Text(), nullable=False),
        sa.Column('last_name', sa.Text(), nullable=False),
        sa.Column('phone_number', sa.String(length=32), nullable=True),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('zip_code', sa.String(length=10), nullable=True),
        sa.Column('background_check_status', sa.Text(), nullable=False),
        sa.Column('availability_schedule', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_volunteers_zip_code', 'volunteers', ['zip_code'])

    op.create_table(
        'volunteer_skills',
        sa.Column('volunteer_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['volunteer_id'], ['volunteers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('volunteer_id', 'skill_id')
    )

    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('senior_id', sa.Integer(), nullable=False),
        sa.Column('volunteer_id', sa.Integer(), nullable=True),
        sa.Column('appointment_datetime', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('location', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('notes_for_volunteer', sa.Text(), nullable=True),
        sa.Column('feedback_from_senior', sa.Text(), nullable=True),
        sa.Column('feedback_from_volunteer', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['senior_id'], ['seniors.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['volunteer_id'], ['volunteers.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_appointments_senior_id', 'appointments', ['senior_id'])
    op.create_index('ix_appointments_volunteer_id', 'appointments', ['volunteer_id'])

    op.create_table(
        'inbound_conversations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('senior_id', sa.Integer(), nullable=True),
        sa.Column('caller_phone_number', sa.String(length=32), nullable=False),
        sa.Column('request_details', sa.Text(), nullable=False),
        sa.Column('matched_skill', sa.Text(), nullable=True),
        sa.Column('nearby_volunteers', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('scheduled_appointment_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['senior_id'], ['seniors.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['scheduled_appointment_id'], ['appointments.id']),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'conversation_calls',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('conversation_id', sa.Integer(), nullable=False),
        sa.Column('volunteer_id', sa.Integer(), nullable=True),
        sa.Column('outcome', sa.String(length=16), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('call_sid', sa.String(length=64), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['conversation_id'], ['inbound_conversations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['volunteer_id'], ['volunteers.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_conversation_calls_conversation_id', 'conversation_calls', ['conversation_id'])
    op.create_index('ix_conversation_calls_call_sid', 'conversation_calls', ['call_sid'])

    op.create_table(
        'call_attempts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('senior_id', sa.Integer(), nullable=False),
        sa.Column('volunteer_id', sa.Integer(), nullable=False),
        sa.Column('outcome', sa.String(length=16), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['senior_id'], ['seniors.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['volunteer_id'], ['volunteers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    op.drop_table('call_attempts')
    op.drop_index('ix_conversation_calls_call_sid', table_name='conversation_calls')
    op.drop_index('ix_conversation_calls_conversation_id', table_name='conversation_calls')
    op.drop_table('conversation_calls')
    op.drop_table('inbound_conversations')
    op.drop_index('ix_appointments_volunteer_id', table_name='appointments')
    op.drop_index('ix_appointments_senior_id', table_name='appointments')
    op.drop_table('appointments')
    op.drop_table('volunteer_skills')
    op.drop_index('ix_volunteers_zip_code', table_name='volunteers')
    op.drop_table('volunteers')
    op.drop_table('skills')
    op.drop_index('ix_seniors_phone_number', table_name='seniors')
    op.drop_table('seniors')
