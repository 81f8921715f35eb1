"""ledger tables

Revision ID: 001
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Singleton network state
    op.create_table(
        'network_state',
        sa.Column('key', sa.String(64), primary_key=True),
        sa.Column('authority', sa.String(255), nullable=False),
        sa.Column('total_devices', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('total_rewards_distributed', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    # Devices
    op.create_table(
        'devices',
        sa.Column('key', sa.String(64), primary_key=True),
        sa.Column('owner', sa.String(255), nullable=False),
        sa.Column('device_id', sa.String(255), nullable=False),
        sa.Column('device_type', sa.String(20), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('accuracy', sa.Float(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('total_uptime', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('total_rewards_earned', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('last_activity', sa.BigInteger(), nullable=False),
        sa.UniqueConstraint('owner', 'device_id', name='uq_devices_owner_device_id'),
        sa.CheckConstraint(
            "device_type IN ('Smartphone', 'Router', 'IoTDevice', 'Hotspot')",
            name='devices_type_check'
        ),
    )
    op.create_index('idx_devices_owner', 'devices', ['owner'])
    op.create_index('idx_devices_active', 'devices', ['is_active'])

    # Append-only telemetry submissions
    op.create_table(
        'data_submissions',
        sa.Column('key', sa.String(64), primary_key=True),
        sa.Column('device_key', sa.String(64), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('signal_strength', sa.Integer(), nullable=False),
        sa.Column('latency', sa.BigInteger(), nullable=False),
        sa.Column('throughput', sa.BigInteger(), nullable=False),
        sa.Column('availability', sa.Float(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('accuracy', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['device_key'], ['devices.key'], ),
        sa.UniqueConstraint('device_key', 'timestamp', name='uq_data_submissions_device_timestamp'),
    )
    op.create_index('idx_data_submissions_device', 'data_submissions', ['device_key'])


def downgrade() -> None:
    op.drop_index('idx_data_submissions_device', table_name='data_submissions')
    op.drop_table('data_submissions')
    op.drop_index('idx_devices_active', table_name='devices')
    op.drop_index('idx_devices_owner', table_name='devices')
    op.drop_table('devices')
    op.drop_table('network_state')
