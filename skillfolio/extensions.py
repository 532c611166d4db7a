from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Flask extensions are created here and initialised in create_app().

db = SQLAlchemy()
migrate = Migrate()
