from setuptools import setup

setup(
    name="firstlast",
    version="0.1.0",
    packages=['firstlast'],
    package_dir={'firstlast': 'firstlast'},
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2",
        "python-dotenv",
        "pillow",
        "pdf2image",
        "PyPDF2>=3",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "firstlast=firstlast.main:main",
        ],
    },
)
