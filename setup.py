"""
Setup configuration for pagesmith package.
"""

from setuptools import setup, find_packages

setup(
    name="pagesmith",
    version="0.1.0",
    description="AI landing page generation, editing and publishing",
    packages=find_packages(include=["pagesmith", "pagesmith.*"]),
    package_data={
        "pagesmith.services.landing_page": ["templates/*.html", "templates/sections/*.html"],
    },
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "supabase>=2.0.0",
        "anthropic>=0.40.0",
        "pydantic>=2.0.0",
        "jinja2>=3.1.0",
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        "slowapi>=0.1.9",
        "python-multipart>=0.0.9",
        "click>=8.1.0",
        "streamlit>=1.30.0",
        "python-dotenv>=1.0.0",
        "logfire>=2.0.0",
        "requests>=2.31.0",
        "python-docx>=1.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.27.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pagesmith=pagesmith.cli.main:cli",
        ],
    },
)
