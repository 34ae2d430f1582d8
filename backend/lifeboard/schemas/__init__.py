from lifeboard.schemas.idea import IdeaCreate, IdeaRecord, IdeaUpdate
from lifeboard.schemas.listing import ListQuery
from lifeboard.schemas.subscription import (
    SubscriptionBase, SubscriptionCreate, SubscriptionList, SubscriptionRecord, SubscriptionUpdate,
)
from lifeboard.schemas.dashboard import CostSummary, DashboardSummary, UpcomingRenewal
from lifeboard.schemas.user import AuthResponse, PasswordChange, UserLogin, UserRegister, UserResponse
