from .catalog import TaskCatalog
from .identity import IdentityResolver
from .leaderboard import Leaderboard
from .ledger import RewardLedger, level_for
from .progress import TaskProgressTracker
from .referrals import ReferralTracker
from .wallet import WalletLinker
