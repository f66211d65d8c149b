from pytest_bdd import scenarios

scenarios("language.feature")
