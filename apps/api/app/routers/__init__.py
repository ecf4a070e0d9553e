from .routes_mentors import router as mentors_router
from .routes_recommendations import router as recommend_router

all_routers = [
    recommend_router,
    mentors_router,
]
