from .base import Base, Column, String, DateTime, Text, JSON, ForeignKey, STATUS_PENDING


class ProjectGig(Base):
    __tablename__ = 'project_gigs'
    id = Column(String(255), primary_key=True)
    user_id = Column(String(255), ForeignKey('users.id'), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    deliverables = Column(Text, nullable=False)
    required_skills = Column(JSON, default=list)
    deadline = Column(DateTime, nullable=True)
    compensation = Column(String(200), nullable=False)
    category_tags = Column(JSON, default=list)  # Pricing Strategy/Market Sizing/...
    status = Column(String(20), default=STATUS_PENDING, index=True)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    EDITABLE_FIELDS = (
        "title",
        "description",
        "deliverables",
        "required_skills",
        "deadline",
        "compensation",
        "category_tags",
    )
    REQUIRED_FIELDS = (
        "title",
        "description",
        "deliverables",
        "required_skills",
        "compensation",
        "category_tags",
    )
    SEARCH_FIELDS = ("title", "description")
