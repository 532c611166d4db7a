from .user import User
from .profile import Profile
from .section_setting import SectionSetting
from .course import Course
from .learning_module import LearningModule
from .lesson import Lesson
from .quiz_question import QuizQuestion
from .course_enrollment import CourseEnrollment
from .user_progress import UserProgress
from .lesson_progress import LessonProgress
from .goal import Goal
from .goal_category import GoalCategory
from .goal_topic import GoalTopic
from .goal_subtopic import GoalSubtopic
from .user_stats import UserStats
from .daily_activity import DailyActivity
from .badge import Badge
from .user_badge import UserBadge
from .forum_post import ForumPost
from .forum_reply import ForumReply
from .post_like import PostLike
from .forum_report import ForumReport
from .notification import Notification

__all__ = [
    "User",
    "Profile",
    "SectionSetting",
    "Course",
    "LearningModule",
    "Lesson",
    "QuizQuestion",
    "CourseEnrollment",
    "UserProgress",
    "LessonProgress",
    "Goal",
    "GoalCategory",
    "GoalTopic",
    "GoalSubtopic",
    "UserStats",
    "DailyActivity",
    "Badge",
    "UserBadge",
    "ForumPost",
    "ForumReply",
    "PostLike",
    "ForumReport",
    "Notification",
]
