from .routes import *
