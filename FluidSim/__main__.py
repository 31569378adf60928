from FluidSim.runner import main

main()
