from setuptools import setup

setup(
    name="cricket-scorer-api",
    version="1.0.0",
    description="Cricket and Super Cricket dart scoring engine with a FastAPI host",
    py_modules=["cricket_rules", "game_logic", "globals", "cricket_api"],
    install_requires=[
        "fastapi",
        "uvicorn[standard]",
        "pydantic",
        "psutil",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
