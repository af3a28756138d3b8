"""Démarrage : python -m student_admin"""

import logging

import uvicorn

from student_admin.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("student_admin.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()
