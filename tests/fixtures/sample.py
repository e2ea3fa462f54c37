from os.path import *

COUNTER = 0


def bump():
    global COUNTER
    COUNTER += 1
    # TODO: persist the counter
    print(COUNTER)


def run(expr):
    return eval(expr)
