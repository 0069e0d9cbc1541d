from .base import Base, Column, String, DateTime, Text, JSON, ForeignKey, STATUS_PENDING


class Startup(Base):
    __tablename__ = 'startups'
    id = Column(String(255), primary_key=True)
    user_id = Column(String(255), ForeignKey('users.id'), nullable=False, index=True)  # 创建者
    name = Column(String(200), nullable=False)
    one_liner = Column(String(300), nullable=False)
    description = Column(Text, nullable=False)
    logo_url = Column(String(512), nullable=True)
    hero_image_url = Column(String(512), nullable=True)
    stage = Column(String(50), nullable=False)  # Idea/Seed/Early/Growth
    milestones = Column(JSON, default=list)
    current_needs = Column(JSON, default=list)
    founder_ids = Column(JSON, default=list)
    linkedin_url = Column(String(512), nullable=True)
    website_url = Column(String(512), nullable=True)
    twitter_url = Column(String(512), nullable=True)
    pitch_deck_url = Column(String(512), nullable=True)
    status = Column(String(20), default=STATUS_PENDING, index=True)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    EDITABLE_FIELDS = (
        "name",
        "one_liner",
        "description",
        "logo_url",
        "hero_image_url",
        "stage",
        "milestones",
        "current_needs",
        "founder_ids",
        "linkedin_url",
        "website_url",
        "twitter_url",
        "pitch_deck_url",
    )
    REQUIRED_FIELDS = ("name", "one_liner", "description", "stage")
    SEARCH_FIELDS = ("name", "one_liner", "description")
