# 导入基础模型
from .base import Base
# 导入用户模型
from .user import User
# 导入内容模型（组队帖 / 项目外包 / 创业项目）
from .team_post import TeamPost
from .project_gig import ProjectGig
from .startup import Startup
# 导入私信模型
from .message import Message
