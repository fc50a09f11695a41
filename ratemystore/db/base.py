from sqlalchemy.orm import declarative_base

# Shared by every ORM model so one metadata holds the whole schema.
Base = declarative_base()
