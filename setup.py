from setuptools import setup, find_packages

CORE_DEPS = [
    "yt-dlp",
    "requests",
    "python-dotenv",
    "colorama",
    "fastapi",
    "uvicorn",
    "psutil",
]

TEST_DEPS = [
    "pytest",
    "httpx",
]

setup(
    name="tubeaudio",
    version="1.0.0",
    description="Web service that streams the audio track of a YouTube video",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"tubeaudio.web": ["static/*.html"]},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=CORE_DEPS,
    extras_require={
        "test": TEST_DEPS,
    },
    entry_points={
        "console_scripts": [
            "tubeaudio=tubeaudio.main:main",
        ],
    },
)
