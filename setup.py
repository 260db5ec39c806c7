from setuptools import setup, find_packages


def get_long_description():
    with open('README.rst', encoding='utf-8') as f:
        return f.read()


setup(
    name='pyrulegrammar',
    description='Transactional rule grammar compiler, parser and token matcher '
                'package for Python.',
    long_description=get_long_description(),
    license='MIT',
    classifiers=[
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
        'Operating System :: OS Independent',
        'Topic :: Multimedia :: Sound/Audio :: Speech',
        'Topic :: Software Development :: Libraries',
    ],
    version='1.0.0',
    packages=find_packages(exclude=['test', 'test.*']),
    python_requires='>=3.8',
    install_requires=['pyparsing>=3.0']
)
