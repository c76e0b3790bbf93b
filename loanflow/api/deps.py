from __future__ import annotations

from fastapi import Depends, Request

from loanflow.directories import Directories
from loanflow.services.application_service import ApplicationService


def get_directories(request: Request) -> Directories:
    # Built once in the app lifespan (see loanflow.main).
    return request.app.state.directories


def get_application_service(directories: Directories = Depends(get_directories)) -> ApplicationService:
    return ApplicationService(directories=directories)
