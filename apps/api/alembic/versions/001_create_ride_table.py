"""create ride table

Revision ID: 001
Revises: 
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ride_type = sa.Enum('commute', 'leisure', 'business', 'other', name='ride_type')


def upgrade() -> None:
    op.create_table(
        'ride',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_minutes', sa.Numeric(10, 2), nullable=False),
        sa.Column('distance_km', sa.Numeric(10, 3), nullable=False),
        sa.Column('start_location', sa.Text(), nullable=False),
        sa.Column('end_location', sa.Text(), nullable=False),
        sa.Column('route_info', sa.Text(), nullable=True),
        sa.Column('ride_type', ride_type, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_ride_user_id', 'ride', ['user_id'])
    op.create_index('ix_ride_start_time', 'ride', ['start_time'])


def downgrade() -> None:
    op.drop_index('ix_ride_start_time', table_name='ride')
    op.drop_index('ix_ride_user_id', table_name='ride')
    op.drop_table('ride')
    ride_type.drop(op.get_bind(), checkfirst=True)
