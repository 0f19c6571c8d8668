from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import the models so they register with Base.metadata
from teamspace.models import user, organization, membership, invitation  # noqa: E402,F401
