from setuptools import setup, find_packages

setup(
    name="ai-playground",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "pydantic>=2",
        "httpx",
        "uvicorn",
        "prompt_toolkit",
        "langchain-core",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    entry_points={
        "console_scripts": [
            "playground=playground.cli:main",
        ],
    },
)
