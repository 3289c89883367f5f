from setuptools import setup, find_packages

setup(
    name="taskmaster-reminders",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi<0.137",
        "uvicorn",
        "celery",
        "redis",
        "firebase-admin",
        "google-cloud-firestore",
        "httpx",
        "python-dotenv",
        "pydantic",
        "pydantic-settings",
        "prometheus-client",
        "prometheus-fastapi-instrumentator",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
)
