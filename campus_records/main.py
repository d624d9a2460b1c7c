from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campus_records.api.v1.courses.router import router as courses_router
from campus_records.api.v1.progression.router import router as progression_router
from campus_records.api.v1.students.router import router as students_router
from campus_records.core.config import settings
from campus_records.core.logging_config import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Campus Records Backend")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Progression routes share the /students prefix; register them before the /{student_id} routes.
    app.include_router(progression_router)
    app.include_router(courses_router)
    app.include_router(students_router)

    return app


app = create_app()
