from setuptools import setup, find_packages

setup(
    name="formqa_agent",
    version="0.1.0",
    description="Explores conditional government-style forms in a browser and checks every branch",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    include_package_data=True,
    package_data={"formqa_agent": ["static/*.html"]},
    install_requires=[
        "playwright==1.52.0",
        "pydantic>=2",
        "python-dotenv",
        "pyyaml",
        "jinja2",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    python_requires='>=3.10',
)
