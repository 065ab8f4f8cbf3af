from hypothesis import HealthCheck, settings

# The first st.text draw builds Hypothesis's unicode charmap cache (~2s on a
# cold checkout), which otherwise trips the too_slow health check.
settings.register_profile("default", suppress_health_check=[HealthCheck.too_slow])
settings.load_profile("default")
