# setup.py
from setuptools import setup, find_packages

setup(
    name="pid_ratelimit",
    version="0.1.0",
    description="PID and EMA feedback controllers for adaptive client-side rate limiting",
    packages=find_packages(include=["pid_ratelimit", "pid_ratelimit.*"]),
    install_requires=[
        'numpy>=1.21.0',
        'scipy>=1.7.0',
        'matplotlib>=3.4.0'
    ],
    extras_require={
        'test': ['pytest>=7.0']
    },
    python_requires='>=3.8',
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
