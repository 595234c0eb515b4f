from pathlib import Path

from setuptools import find_namespace_packages, setup

# Load README.md as long description
readme_path = Path(__file__).parent / "README.md"
long_description = (
    readme_path.read_text(encoding="utf-8")
    if readme_path.exists()
    else ""
)

setup(
    name="streamscout",
    version="1.0.0",
    description=(
        "Movie search and streaming-availability lookup with a "
        "subscription bundle analyzer, exposed via a FastAPI backend."
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    # server/ y server/api/ no llevan __init__.py
    packages=find_namespace_packages(include=("streamscout*", "server*")),
    include_package_data=True,
    install_requires=[
        # Core runtime
        "python-dotenv>=1.0",
        "requests>=2.31",
        "urllib3>=2.0",

        # FastAPI server
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
    ],
    extras_require={
        "dev": [
            # Tooling
            "black>=24.0",
            "ruff>=0.6",
            "pytest>=8.0",
            # fastapi.testclient
            "httpx>=0.27",

            # Typing / static analysis
            "mypy>=1.8",
            "pyright>=1.1.390",

            # Stubs
            "types-requests>=2.31",
        ],
    },
    entry_points={
        "console_scripts": [
            "start-server=server.__main__:main",
        ]
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Web Environment",
        "Framework :: FastAPI",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    ],
)
