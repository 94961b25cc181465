# setup.py
from setuptools import setup, find_packages

setup(
    name="page_dumper",
    version="0.1.0",
    description="Офлайн-снимок одной веб-страницы: перехват запросов и переписывание HTML/CSS",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"page_dumper": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "jinja2>=3.1",
        "lxml>=5.0",
        "playwright>=1.40",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "tinycss2>=1.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.4,<9",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["page-dumper=page_dumper.cli:cli"],
    },
    python_requires=">=3.11",
)
