# app/routers/__init__.py

# Esto expone los módulos para que "from app.routers import users" funcione
from . import auth
from . import users
from . import clients
from . import accounts
from . import cash
from . import sales
from . import orders
from . import quotes
from . import purchases
from . import products
from . import inventory
from . import reports
from . import tickets
