from .config import *
from .database import *
from .errors import *
from .models import *
from .security import *
