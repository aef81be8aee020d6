"""
Domain-split Pydantic schemas with an aggregator.

Routers import everything through `franchisehub.db.schemas`.
"""

from .tenants import TenantBase, TenantCreate, TenantUpdate, Tenant
from .users import (
    UserBase,
    UserCreate,
    User,
    PasswordChange,
    UserActiveUpdate,
    LoginRequest,
    TokenResponse,
    SignupWithInvite,
    SignupResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    MessageResponse,
)
from .restaurants import RestaurantBase, RestaurantCreate, Restaurant
from .invites import InviteBase, InviteCreate, InvitePublic, Invite
from .categories import CategoryCreate, CategoryUpdate, Category, CategoryTree
from .documents import TagCreate, Tag, DocumentCreate, Document
from .tickets import (
    TicketCreate,
    TicketStatusUpdate,
    CommentCreate,
    AttachmentCreate,
    Attachment,
    Comment,
    Ticket,
    TicketDetail,
    DeletedCount,
)
from .announcements import (
    AnnouncementCreate,
    AnnouncementDocument,
    Announcement,
    AnnouncementViewEntry,
    AnnouncementStats,
)
from .notifications import (
    Notification,
    NotificationPage,
    UnreadCounts,
    ViewCreate,
    View,
    ViewPage,
    MarkAllRead,
    MarkCategoryRead,
    SuccessResponse,
)
from .dashboard import TicketsPerDay, DashboardStats, SearchResult, SearchResponse
from .audits import (
    AuditTemplateItemCreate,
    AuditTemplateItem,
    AuditTemplateCreate,
    AuditTemplateUpdate,
    AuditTemplate,
    SuggestedQuestion,
    AuditExecutionCreate,
    AuditResponseInput,
    AuditResponsesPayload,
    AuditCompletePayload,
    AuditResponse,
    AuditExecution,
    AuditExecutionDetail,
    UpdatedCount,
    NonConformityCreate,
    NonConformityUpdate,
    NonConformity,
    NonConformityStatusCounts,
    NonConformityStats,
    CorrectiveActionCreate,
    CorrectiveActionUpdate,
    CompletionNotes,
    ValidationNotes,
    CorrectiveAction,
    AuditArchive,
    AuditArchivePage,
    CategoryCount,
    AuditArchiveStats,
    AutoArchiveResult,
    CleanupResult,
)
from .planning import PlanningTaskCreate, PlanningTaskUpdate, PlanningTask, CalendarResponse
from .activity import ActivityLog
