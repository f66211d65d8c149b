from pytest_bdd import parsers, then, when


@then("I should be on the forgot password page")
def on_forgot_password_page(run, pages, scenario_ctx):
    page = pages.forgot_password
    run(page.wait_for_condition(page.is_on_forgot_password_page, message="Expected to navigate to forgot password page"))
    run(page.wait_for_page_load())
    scenario_ctx.current_page = page


@when("I enter a registered email in the reset email field")
def enter_registered_email(run, pages, suite_data):
    run(pages.forgot_password.enter_email(suite_data.valid_user.email))


@when(parsers.parse('I enter "{email}" in the reset email field'))
def enter_reset_email(run, pages, email):
    run(pages.forgot_password.enter_email(email))


@when("I click the Send Reset Password Link button")
def click_send_reset(run, pages):
    run(pages.forgot_password.click_send_reset())


@then("I should see a success popup displayed")
def reset_popup_displayed(run, pages):
    text = run(pages.forgot_password.get_success_message())
    assert "password recovery link" in text, f"unexpected reset confirmation: {text!r}"


@then("I should be redirected back to the login page")
def back_on_login(run, pages):
    run(pages.forgot_password.wait_for_url_contains("/login"))
