"""Initial schema: practice set content tree, users and attempts

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

section_type = sa.Enum('READING', 'WRITING', 'LISTENING', 'SPEAKING', name='sectiontype')
question_type = sa.Enum('MCQ', 'CLOZE', 'PASSAGE', name='questiontype')
part_layout = sa.Enum('DIRECT', 'SEGMENTED', name='partlayout')
user_role = sa.Enum('ADMIN', 'USER', name='userrole')


def upgrade() -> None:
    # Create practice_set table
    op.create_table(
        'practice_set',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=False, server_default=''),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # Create section table
    op.create_table(
        'section',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('set_id', sa.String(), nullable=False),
        sa.Column('type', section_type, nullable=False),
        sa.Column('title', sa.String(), nullable=False, server_default=''),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['set_id'], ['practice_set.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('set_id', 'position', name='uq_section_set_position')
    )
    op.create_index(op.f('ix_section_set_id'), 'section', ['set_id'], unique=False)

    # Create part table
    op.create_table(
        'part',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('section_id', sa.String(), nullable=False),
        sa.Column('content_text', sa.Text(), nullable=False, server_default=''),
        sa.Column('image_data', sa.Text(), nullable=True),
        sa.Column('audio_data', sa.Text(), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('timer_seconds', sa.Integer(), nullable=False, server_default='600'),
        sa.Column('prep_seconds', sa.Integer(), nullable=True),
        sa.Column('layout', part_layout, nullable=False, server_default='DIRECT'),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['section_id'], ['section.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('section_id', 'position', name='uq_part_section_position')
    )
    op.create_index(op.f('ix_part_section_id'), 'part', ['section_id'], unique=False)

    # Create segment table
    op.create_table(
        'segment',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('part_id', sa.String(), nullable=False),
        sa.Column('content_text', sa.Text(), nullable=False, server_default=''),
        sa.Column('audio_data', sa.Text(), nullable=True),
        sa.Column('prep_seconds', sa.Integer(), nullable=True),
        sa.Column('timer_seconds', sa.Integer(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['part_id'], ['part.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('part_id', 'position', name='uq_segment_part_position')
    )
    op.create_index(op.f('ix_segment_part_id'), 'segment', ['part_id'], unique=False)

    # Create question table; exactly one of part_id / segment_id is set
    op.create_table(
        'question',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('part_id', sa.String(), nullable=True),
        sa.Column('segment_id', sa.String(), nullable=True),
        sa.Column('question_text', sa.Text(), nullable=False, server_default=''),
        sa.Column('type', question_type, nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('correct_answer', sa.String(), nullable=True),
        sa.Column('weight', sa.Float(), nullable=False, server_default='1'),
        sa.Column('audio_data', sa.Text(), nullable=True),
        sa.Column('image_data', sa.Text(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['part_id'], ['part.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['segment_id'], ['segment.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('(part_id IS NULL) <> (segment_id IS NULL)', name='question_single_parent_check'),
        sa.UniqueConstraint('part_id', 'position', name='uq_question_part_position'),
        sa.UniqueConstraint('segment_id', 'position', name='uq_question_segment_position')
    )
    op.create_index(op.f('ix_question_part_id'), 'question', ['part_id'], unique=False)
    op.create_index(op.f('ix_question_segment_id'), 'question', ['segment_id'], unique=False)

    # Create user table
    op.create_table(
        'user',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('role', user_role, nullable=False, server_default='USER'),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    # Create attempt table; user_id and set_id are intentionally not foreign keys
    op.create_table(
        'attempt',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('set_id', sa.String(), nullable=False),
        sa.Column('set_title', sa.String(), nullable=False, server_default=''),
        sa.Column('completed_at', sa.DateTime(), nullable=False),
        sa.Column('section_scores', sa.JSON(), nullable=False),
        sa.Column('band_score', sa.Float(), nullable=True),
        sa.Column('feedback', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_attempt_user_id'), 'attempt', ['user_id'], unique=False)
    op.create_index(op.f('ix_attempt_set_id'), 'attempt', ['set_id'], unique=False)
    op.create_index(op.f('ix_attempt_completed_at'), 'attempt', ['completed_at'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_attempt_completed_at'), table_name='attempt')
    op.drop_index(op.f('ix_attempt_set_id'), table_name='attempt')
    op.drop_index(op.f('ix_attempt_user_id'), table_name='attempt')
    op.drop_table('attempt')

    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_table('user')

    op.drop_index(op.f('ix_question_segment_id'), table_name='question')
    op.drop_index(op.f('ix_question_part_id'), table_name='question')
    op.drop_table('question')

    op.drop_index(op.f('ix_segment_part_id'), table_name='segment')
    op.drop_table('segment')

    op.drop_index(op.f('ix_part_section_id'), table_name='part')
    op.drop_table('part')

    op.drop_index(op.f('ix_section_set_id'), table_name='section')
    op.drop_table('section')

    op.drop_table('practice_set')

    bind = op.get_bind()
    for enum_type in (user_role, part_layout, question_type, section_type):
        enum_type.drop(bind, checkfirst=True)
