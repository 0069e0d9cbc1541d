from .base import Base, Column, String, DateTime, Text, JSON, ForeignKey, STATUS_PENDING


class TeamPost(Base):
    __tablename__ = 'team_posts'
    id = Column(String(255), primary_key=True)
    user_id = Column(String(255), ForeignKey('users.id'), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    skills_needed = Column(JSON, default=list)
    time_commitment = Column(String(50), nullable=False)  # Full-time/Part-time/Flexible
    compensation_type = Column(String(50), nullable=False)  # Equity/Paid/Unpaid/TBD
    category = Column(String(100), nullable=False)
    status = Column(String(20), default=STATUS_PENDING, index=True)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    EDITABLE_FIELDS = (
        "title",
        "description",
        "skills_needed",
        "time_commitment",
        "compensation_type",
        "category",
    )
    REQUIRED_FIELDS = EDITABLE_FIELDS
    SEARCH_FIELDS = ("title", "description")
