"""
SQLAlchemy models split per domain and re-exported here.
"""
from .base import Base, now_utc, as_utc
from .tenants import Tenant, RestaurantType
from .users import User, PasswordReset
from .restaurants import Restaurant
from .invites import Invite
from .categories import Category
from .documents import Document, Tag, document_tags
from .tickets import Ticket, Comment, TicketAttachment, TicketStatus
from .announcements import (
    Announcement,
    AnnouncementView,
    announcement_restaurants,
    announcement_documents,
)
from .notifications import Notification, View, NotificationType, ViewTargetType
from .audits import (
    AuditTemplate,
    AuditTemplateItem,
    AuditExecution,
    AuditResponse,
    NonConformity,
    CorrectiveAction,
    AuditArchive,
    AuditCategory,
    AuditFrequency,
    QuestionType,
    ExecutionStatus,
    Severity,
    NonConformityStatus,
    ActionCategory,
    ActionStatus,
    ActionPriority,
    ArchiveStatus,
)
from .planning import PlanningTask, PlanningTaskType, PlanningTaskStatus
from .activity import ActivityLog

__all__ = [
    'Base', 'now_utc', 'as_utc',
    'Tenant', 'RestaurantType',
    'User', 'PasswordReset',
    'Restaurant',
    'Invite',
    'Category',
    'Document', 'Tag', 'document_tags',
    'Ticket', 'Comment', 'TicketAttachment', 'TicketStatus',
    'Announcement', 'AnnouncementView', 'announcement_restaurants', 'announcement_documents',
    'Notification', 'View', 'NotificationType', 'ViewTargetType',
    'AuditTemplate', 'AuditTemplateItem', 'AuditExecution', 'AuditResponse',
    'NonConformity', 'CorrectiveAction', 'AuditArchive',
    'AuditCategory', 'AuditFrequency', 'QuestionType', 'ExecutionStatus', 'Severity',
    'NonConformityStatus', 'ActionCategory', 'ActionStatus', 'ActionPriority', 'ArchiveStatus',
    'PlanningTask', 'PlanningTaskType', 'PlanningTaskStatus',
    'ActivityLog',
]
