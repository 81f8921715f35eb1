"""
Network-wide state record
"""
from sqlalchemy import BigInteger, Boolean, Column, String

from depin.core.addressing import NETWORK_STATE_KEY
from depin.core.database import Base


class NetworkState(Base):
    """Singleton holding the network authority, aggregate counters and the pause flag"""
    __tablename__ = "network_state"

    key = Column(String(64), primary_key=True, default=NETWORK_STATE_KEY)
    authority = Column(String(255), nullable=False)
    total_devices = Column(BigInteger, nullable=False, default=0)
    total_rewards_distributed = Column(BigInteger, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return (
            f"<NetworkState(authority={self.authority}, devices={self.total_devices}, "
            f"rewards={self.total_rewards_distributed}, active={self.is_active})>"
        )
