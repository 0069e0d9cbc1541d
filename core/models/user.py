from .base import Base, Column, String, DateTime, Boolean, Text, JSON


class User(Base):
    __tablename__ = 'users'
    id = Column(String(255), primary_key=True)  # 外部身份 sub
    email = Column(String(255), unique=True, nullable=True)
    first_name = Column(String(100), default='')
    last_name = Column(String(100), default='')
    profile_image_url = Column(String(512), default='')

    # 个人资料
    university = Column(String(200), default='')
    major = Column(String(200), default='')
    experience_level = Column(String(50), default='')  # Beginner/Intermediate/Advanced
    bio = Column(Text, default='')
    skills = Column(JSON, default=list)
    interests = Column(JSON, default=list)
    looking_for = Column(Text, default='')

    is_admin = Column(Boolean, default=False)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    PROFILE_FIELDS = (
        "university",
        "major",
        "experience_level",
        "bio",
        "skills",
        "interests",
        "looking_for",
    )
