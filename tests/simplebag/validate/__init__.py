from unittest import TestLoader, TestSuite

def additional_tests():
    from . import test_base, test_bag

    mods = dict(locals())
    suites = [TestLoader().loadTestsFromModule(m[1])
                     for m in mods.items() if m[0].startswith("test_")]
    return TestSuite(suites)
