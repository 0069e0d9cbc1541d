from .base import Base, Column, String, DateTime, Boolean, Text, ForeignKey, Index


class Message(Base):
    __tablename__ = 'messages'
    id = Column(String(255), primary_key=True)
    sender_id = Column(String(255), ForeignKey('users.id'), nullable=False)
    receiver_id = Column(String(255), ForeignKey('users.id'), nullable=False)
    content = Column(Text, nullable=False)
    read = Column(Boolean, default=False)
    created_at = Column(DateTime)

    __table_args__ = (
        Index("idx_sender_receiver", "sender_id", "receiver_id"),
        Index("idx_created_at", "created_at"),
    )
