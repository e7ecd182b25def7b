# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.

from mealtrack.models.registrant import Registrant  # noqa: F401 : doit précéder les inscriptions
from mealtrack.models.group import Group  # noqa: F401
from mealtrack.models.meal_registration import MealRegistration  # noqa: F401
from mealtrack.models.attendance import AttendanceRecord  # noqa: F401
