from fastapi import APIRouter, Depends

from ..api.dependencies import get_catalog
from ..api.schemas import InitTasksResponse
from ..core.security import get_admin_user
from ..services import TaskCatalog

# --- Setup ---
router = APIRouter()

DEFAULT_TASKS = [
    dict(title="Follow @CryptoProject", description="Follow our Twitter account", reward=50,
         type="social", category="twitter", icon="fab fa-twitter",
         action_url="https://twitter.com/cryptoproject", verification_data={}, sort_order=1),
    dict(title="Subscribe YouTube", description="Subscribe to our channel", reward=75,
         type="social", category="youtube", icon="fab fa-youtube",
         action_url="https://youtube.com/@cryptoproject", verification_data={}, sort_order=2),
    dict(title="Join Telegram Channel", description="Join our official Telegram channel", reward=100,
         type="social", category="telegram", icon="fab fa-telegram",
         action_url="https://t.me/cryptoproject", verification_data={}, sort_order=3),
    dict(title="Daily Check-in", description="Visit daily for bonus", reward=25,
         type="daily", category="daily", icon="fas fa-calendar-check",
         action_url="", verification_data={}, sort_order=4),
    dict(title="Refer 3 Friends", description="Invite friends to join", reward=200,
         type="referral", category="referral", icon="fas fa-user-plus",
         action_url="", verification_data={"requiredReferrals": 3}, sort_order=5),
]


@router.post("/init-tasks", response_model=InitTasksResponse, dependencies=[Depends(get_admin_user)])
def init_tasks(catalog: TaskCatalog = Depends(get_catalog)):
    created = catalog.seed(DEFAULT_TASKS)
    print(f"--- Seeded {len(created)} default tasks")
    return InitTasksResponse(success=True, message="Default tasks created", created=len(created))
